"""
Conversion orchestrator.

Every convert, format or validate call follows the same sequence:

    Start -> TryAssisted (only when a backend is configured) -> Native -> Done

An assisted answer is returned as-is. Any assisted failure is logged and
absorbed, then the native path runs: parse the source text into a canonical
value and serialize it into the target format. The native path is pure and
deterministic. The orchestrator keeps no per-request state, so one instance
serves concurrent requests.
"""

import json
import logging
from typing import Optional

from .assist import AssistBackend, AssistRequest, AssistTask
from .config import ConversionMethod, ConverterConfig, DataFormat, normalize_format_token
from .exceptions import AssistedPathFailure, ConversionError, DataConversionError, MissingInputError
from .formats import create_codecs
from .models import ConversionRequest, ConversionResult, ValidationOutcome
from .utils.logging_config import log_performance
from .validate import FormatValidator

logger = logging.getLogger(__name__)


class ConversionOrchestrator:
    """Selects codecs, sequences parse and serialize, and applies the fallback policy."""

    def __init__(self, config: ConverterConfig, assist_backend: Optional[AssistBackend] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Explicit converter configuration
            assist_backend: Optional generative backend tried before the native path
        """
        self.config = config
        self.assist_backend = assist_backend
        self._codecs = create_codecs(xml_root_name=config.xml_root_name)
        self._validator = FormatValidator(self._codecs)

    @staticmethod
    def resolve_format(token) -> DataFormat:
        """Resolve a format token, raising ``UnsupportedFormatError`` if unknown."""
        return normalize_format_token(token)

    def build_request(self, data, from_format, to_format, csv_strict: Optional[bool] = None) -> ConversionRequest:
        """
        Build a conversion request from raw payload fields.

        Raises:
            MissingInputError: If any field is absent or empty
            UnsupportedFormatError: If a format token is not recognized
        """
        missing = [
            name for name, value in (("data", data), ("fromFormat", from_format), ("toFormat", to_format))
            if value is None or value == ""
        ]
        if missing:
            raise MissingInputError(
                f"Missing required field(s): {', '.join(missing)}",
                details={"missing": missing}
            )
        if not isinstance(data, str):
            raise MissingInputError("Field 'data' must be a string", details={"data_type": type(data).__name__})

        return ConversionRequest(
            source_text=data,
            source_format=self.resolve_format(from_format),
            target_format=self.resolve_format(to_format),
            csv_strict=csv_strict
        )

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Convert a request, trying the assisted path first when configured.

        Never raises for parse or serialize failures; those come back as a
        failed ``ConversionResult`` tagged with the stage.
        """
        task = AssistTask.FORMAT if request.is_format_only else AssistTask.CONVERT
        assisted = await self._try_assisted(
            AssistRequest(task, request.source_text, request.source_format, request.target_format)
        )
        if assisted is not None:
            return ConversionResult.succeeded(assisted, ConversionMethod.ASSISTED)

        try:
            payload = self.convert_native(request)
        except ConversionError as e:
            logger.info(f"Native conversion of {request!r} failed at {e.stage}: {e.message}")
            return ConversionResult.failed(e.message, e.code, stage=e.stage)

        return ConversionResult.succeeded(payload, ConversionMethod.NATIVE)

    async def format(self, text: str, data_format, csv_strict: Optional[bool] = None) -> ConversionResult:
        """Pretty-print text in place: a conversion whose source and target formats match."""
        request = self.build_request(text, data_format, data_format, csv_strict=csv_strict)
        return await self.convert(request)

    async def validate(self, text: str, data_format, csv_strict: Optional[bool] = None) -> ValidationOutcome:
        """
        Check the syntax of text in the given format.

        Raises:
            MissingInputError: If text or format is absent
            UnsupportedFormatError: If the format token is not recognized
        """
        if text is None or text == "" or data_format is None or data_format == "":
            raise MissingInputError("Missing required field(s): data and format are required")
        resolved = self.resolve_format(data_format)

        if isinstance(text, str):
            answer = await self._try_assisted(AssistRequest(AssistTask.VALIDATE, text, resolved))
            if answer is not None:
                outcome = self._parse_assisted_validation(answer)
                if outcome is not None:
                    return outcome

        return self._validator.validate_text(text, resolved, strict=self._csv_strict(csv_strict))

    @log_performance(logger, logging.DEBUG)
    def convert_native(self, request: ConversionRequest) -> str:
        """
        Run the deterministic native path.

        Raises:
            ConversionError: With stage ``parse`` or ``serialize`` and the underlying cause
        """
        source_codec = self._codecs[request.source_format]
        target_codec = self._codecs[request.target_format]

        try:
            value = source_codec.parse(request.source_text, strict=self._csv_strict(request.csv_strict))
        except DataConversionError as e:
            raise ConversionError(ConversionError.PARSE, e) from e

        try:
            return target_codec.serialize(value)
        except DataConversionError as e:
            raise ConversionError(ConversionError.SERIALIZE, e) from e

    def _csv_strict(self, override: Optional[bool]) -> bool:
        return self.config.csv_strict if override is None else bool(override)

    async def _try_assisted(self, request: AssistRequest) -> Optional[str]:
        """Run the assisted path once; None means fall back to native."""
        if self.assist_backend is None:
            return None

        try:
            return await self.assist_backend.try_convert(request)
        except AssistedPathFailure as e:
            logger.warning(f"Assisted {request.task.value} failed, falling back to native: {e.message}")
        except Exception as e:
            logger.warning(f"Assisted {request.task.value} raised {type(e).__name__}, falling back to native: {e}")
        return None

    @staticmethod
    def _parse_assisted_validation(answer: str) -> Optional[ValidationOutcome]:
        """Read the ``{valid, message}`` object an assisted validation must answer with."""
        try:
            verdict = json.loads(answer)
        except ValueError:
            logger.warning("Assisted validation answer is not JSON, falling back to native")
            return None

        if not isinstance(verdict, dict) or not isinstance(verdict.get("valid"), bool):
            logger.warning("Assisted validation answer has no boolean 'valid', falling back to native")
            return None

        message = verdict.get("message")
        return ValidationOutcome(
            valid=verdict["valid"],
            message=message if isinstance(message, str) else "",
            method=ConversionMethod.ASSISTED
        )
