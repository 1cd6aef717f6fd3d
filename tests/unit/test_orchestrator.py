"""
Unit tests for the conversion orchestrator and its assisted path.
"""

import json
import logging

import httpx
import pytest

from dataconvert.assist import AssistRequest, AssistTask, OpenAIAssistBackend, create_assist_backend
from dataconvert.config import AssistConfig, ConversionMethod, ConverterConfig, DataFormat
from dataconvert.exceptions import ConversionError, MissingInputError, UnsupportedFormatError
from dataconvert.models import ConversionRequest
from dataconvert.orchestrator import ConversionOrchestrator


def make_request(data, source, target, csv_strict=None):
    return ConversionRequest(data, DataFormat(source), DataFormat(target), csv_strict=csv_strict)


def chat_completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_openai_backend(handler, api_key="sk-test"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIAssistBackend(AssistConfig(api_key=api_key, timeout=5.0), client=client)


class TestNativeConversion:
    """Test the native parse and serialize path."""

    @pytest.mark.asyncio
    async def test_json_to_yaml(self, orchestrator):
        result = await orchestrator.convert(make_request('{"a":1,"b":[true,null]}', "json", "yaml"))
        assert result.success is True
        assert result.method == ConversionMethod.NATIVE
        assert result.payload == "a: 1\nb:\n  - true\n  - null\n"

    @pytest.mark.asyncio
    async def test_csv_to_json(self, orchestrator):
        result = await orchestrator.convert(make_request("name,age\nAna,30\nLeo,25", "csv", "json"))
        assert json.loads(result.payload) == [{"name": "Ana", "age": "30"}, {"name": "Leo", "age": "25"}]

    @pytest.mark.asyncio
    async def test_parse_failure_is_tagged_with_stage(self, orchestrator):
        result = await orchestrator.convert(make_request('{"a":}', "json", "yaml"))
        assert result.success is False
        assert result.stage == "parse"
        assert result.error_code == "SYNTAX_ERROR"
        assert result.error.startswith("Parse failed: Invalid JSON:")
        assert result.to_dict() == {"success": False, "error": result.error, "method": "native"}

    @pytest.mark.asyncio
    async def test_serialize_failure_is_tagged_with_stage(self, orchestrator):
        result = await orchestrator.convert(make_request('"just text"', "json", "csv"))
        assert result.success is False
        assert result.stage == "serialize"
        assert result.error_code == "UNSUPPORTED_SHAPE"

    @pytest.mark.asyncio
    async def test_recursive_yaml_alias_fails_at_parse(self, orchestrator):
        result = await orchestrator.convert(make_request("a: &x [*x]\n", "yaml", "json"))
        assert result.success is False
        assert result.stage == "parse"
        assert result.error_code == "UNSUPPORTED_SHAPE"
        assert result.method == ConversionMethod.NATIVE

    @pytest.mark.asyncio
    async def test_recursive_yaml_alias_is_invalid(self, orchestrator):
        outcome = await orchestrator.validate("a: &x [*x]\n", "yaml")
        assert outcome.valid is False
        assert outcome.method == ConversionMethod.NATIVE

    @pytest.mark.asyncio
    async def test_csv_strict_override(self, orchestrator):
        text = "a,b\n1\n"
        assert (await orchestrator.convert(make_request(text, "csv", "json"))).success is True
        result = await orchestrator.convert(make_request(text, "csv", "json", csv_strict=True))
        assert result.success is False
        assert result.error_code == "SYNTAX_ERROR"

    @pytest.mark.asyncio
    async def test_configured_csv_strict_default(self):
        orchestrator = ConversionOrchestrator(ConverterConfig(csv_strict=True))
        result = await orchestrator.convert(make_request("a,b\n1\n", "csv", "json"))
        assert result.success is False

    def test_convert_native_raises_conversion_error(self, orchestrator):
        with pytest.raises(ConversionError) as exc_info:
            orchestrator.convert_native(make_request("<a>", "xml", "json"))
        assert exc_info.value.stage == ConversionError.PARSE
        assert exc_info.value.code == "SYNTAX_ERROR"
        assert exc_info.value.cause.format_type == "xml"

    def test_native_conversion_is_deterministic(self, orchestrator, sample_document):
        for target in DataFormat:
            if target == DataFormat.CSV and sample_document["format"] != "csv":
                continue
            request = make_request(sample_document["data"], sample_document["format"], target.value)
            assert orchestrator.convert_native(request) == orchestrator.convert_native(request)

    @pytest.mark.asyncio
    async def test_format_is_idempotent(self, orchestrator, sample_document):
        once = await orchestrator.format(sample_document["data"], sample_document["format"])
        twice = await orchestrator.format(once.payload, sample_document["format"])
        assert once.success and twice.success
        assert twice.payload == once.payload

    def test_json_xml_json_keeps_structure_with_text_leaves(self, orchestrator):
        source = '{"person": {"name": "Ana", "age": 30, "active": true}}'
        xml_text = orchestrator.convert_native(make_request(source, "json", "xml"))
        back = json.loads(orchestrator.convert_native(make_request(xml_text, "xml", "json")))
        assert back == {"person": {"name": "Ana", "age": "30", "active": "true"}}


class TestRequestBuilding:
    """Test request validation before any conversion."""

    @pytest.mark.parametrize("data,source,target", [
        (None, "json", "yaml"),
        ("", "json", "yaml"),
        ("{}", "", "yaml"),
        ("{}", "json", None),
    ])
    def test_missing_fields(self, orchestrator, data, source, target):
        with pytest.raises(MissingInputError):
            orchestrator.build_request(data, source, target)

    def test_unknown_format_is_named(self, orchestrator):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            orchestrator.build_request("{}", "json", "toml")
        assert "toml" in exc_info.value.message

    def test_tokens_are_case_insensitive(self, orchestrator):
        request = orchestrator.build_request("{}", "JSON", "Yml")
        assert request.source_format == DataFormat.JSON
        assert request.target_format == DataFormat.YAML

    @pytest.mark.asyncio
    async def test_validate_requires_format(self, orchestrator):
        with pytest.raises(MissingInputError):
            await orchestrator.validate("{}", None)


class TestAssistedFallback:
    """Test that assisted failures always fall back to the native path."""

    @pytest.mark.asyncio
    async def test_convert_falls_back(self, failing_orchestrator, failing_backend):
        result = await failing_orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.success is True
        assert result.method == ConversionMethod.NATIVE
        assert result.payload == "a: 1\n"
        assert len(failing_backend.calls) == 1
        assert failing_backend.calls[0].task == AssistTask.CONVERT

    @pytest.mark.asyncio
    async def test_format_falls_back(self, failing_orchestrator, failing_backend, sample_document):
        result = await failing_orchestrator.format(sample_document["data"], sample_document["format"])
        assert result.success is True
        assert result.method == ConversionMethod.NATIVE
        assert failing_backend.calls[0].task == AssistTask.FORMAT

    @pytest.mark.asyncio
    async def test_validate_falls_back(self, failing_orchestrator, sample_document):
        outcome = await failing_orchestrator.validate(sample_document["data"], sample_document["format"])
        assert outcome.valid is True
        assert outcome.method == ConversionMethod.NATIVE

    @pytest.mark.asyncio
    async def test_unexpected_backend_exception_falls_back(self, config, failing_backend_class):
        backend = failing_backend_class(error=RuntimeError("boom"))
        orchestrator = ConversionOrchestrator(config, assist_backend=backend)
        result = await orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.success is True
        assert result.method == ConversionMethod.NATIVE

    @pytest.mark.asyncio
    async def test_fallback_is_logged(self, failing_orchestrator, caplog):
        with caplog.at_level(logging.WARNING, logger="dataconvert.orchestrator"):
            await failing_orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert "falling back to native" in caplog.text

    @pytest.mark.asyncio
    async def test_assisted_answer_is_returned_as_is(self, config, static_backend):
        backend = static_backend("anything the model says")
        orchestrator = ConversionOrchestrator(config, assist_backend=backend)
        result = await orchestrator.convert(make_request("not even json", "json", "yaml"))
        assert result.success is True
        assert result.method == ConversionMethod.ASSISTED
        assert result.payload == "anything the model says"

    @pytest.mark.asyncio
    async def test_assisted_validation_verdict(self, config, static_backend):
        backend = static_backend('{"valid": false, "message": "missing value"}')
        orchestrator = ConversionOrchestrator(config, assist_backend=backend)
        outcome = await orchestrator.validate('{"a":}', "json")
        assert outcome.to_dict() == {"valid": False, "message": "missing value", "method": "assisted"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", ["looks fine to me", '["valid"]', '{"valid": "yes"}'])
    async def test_unusable_validation_verdict_falls_back(self, config, static_backend, answer):
        orchestrator = ConversionOrchestrator(config, assist_backend=static_backend(answer))
        outcome = await orchestrator.validate('{"a":}', "json")
        assert outcome.valid is False
        assert outcome.method == ConversionMethod.NATIVE

    def test_no_backend_without_assist_config(self, config):
        assert create_assist_backend(config) is None


class TestOpenAIAssistBackend:
    """Test the OpenAI-compatible backend against a mock transport."""

    @pytest.mark.asyncio
    async def test_successful_answer(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=chat_completion("  a: 1\n"))

        backend = make_openai_backend(handler)
        answer = await backend.try_convert(
            AssistRequest(AssistTask.CONVERT, '{"a": 1}', DataFormat.JSON, DataFormat.YAML)
        )
        assert answer == "a: 1"
        assert seen["url"] == "https://api.openai.com/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "gpt-4o"
        assert seen["body"]["messages"][0]["role"] == "system"
        assert "from JSON to YAML" in seen["body"]["messages"][-1]["content"]

    @pytest.mark.asyncio
    async def test_assisted_result_through_orchestrator(self, config):
        backend = make_openai_backend(lambda request: httpx.Response(200, json=chat_completion("a: 1")))
        orchestrator = ConversionOrchestrator(config, assist_backend=backend)
        result = await orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.method == ConversionMethod.ASSISTED
        assert result.payload == "a: 1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="upstream error"),
        httpx.Response(401, json={"error": "bad key"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json=chat_completion("   ")),
    ])
    async def test_bad_responses_fall_back(self, config, response):
        backend = make_openai_backend(lambda request: response)
        orchestrator = ConversionOrchestrator(config, assist_backend=backend)
        result = await orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.success is True
        assert result.method == ConversionMethod.NATIVE
        assert result.payload == "a: 1\n"

    @pytest.mark.asyncio
    async def test_timeout_falls_back_without_retry(self, config):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        orchestrator = ConversionOrchestrator(config, assist_backend=make_openai_backend(handler))
        result = await orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.method == ConversionMethod.NATIVE
        assert len(calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_key", ["", "   ", "sk test", "sk-tést"])
    async def test_malformed_credential_skips_network(self, config, api_key):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=chat_completion("a: 1"))

        orchestrator = ConversionOrchestrator(config, assist_backend=make_openai_backend(handler, api_key=api_key))
        result = await orchestrator.convert(make_request('{"a": 1}', "json", "yaml"))
        assert result.method == ConversionMethod.NATIVE
        assert calls == []

    def test_factory_builds_openai_backend(self):
        config = ConverterConfig(assist=AssistConfig(api_key="sk-test", base_url="http://localhost:8080/v1/"))
        backend = create_assist_backend(config)
        assert isinstance(backend, OpenAIAssistBackend)
        assert backend.endpoint == "http://localhost:8080/v1/chat/completions"
