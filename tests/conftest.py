"""
Shared test configuration and fixtures for dataconvert tests.
"""

from typing import List

import pytest
from fastapi.testclient import TestClient

from app import app
from dataconvert.assist import AssistBackend, AssistRequest
from dataconvert.config import ConverterConfig
from dataconvert.exceptions import AssistedPathFailure
from dataconvert.orchestrator import ConversionOrchestrator


# ===== FAKE ASSIST BACKENDS =====

class FailingAssistBackend(AssistBackend):
    """Assist backend that fails every call, recording what it was asked."""

    name = "failing"

    def __init__(self, error: Exception = None):
        self.error = error or AssistedPathFailure("simulated assist failure")
        self.calls: List[AssistRequest] = []

    async def try_convert(self, request: AssistRequest) -> str:
        self.calls.append(request)
        raise self.error


class StaticAssistBackend(AssistBackend):
    """Assist backend that always answers with the same text."""

    name = "static"

    def __init__(self, answer: str):
        self.answer = answer
        self.calls: List[AssistRequest] = []

    async def try_convert(self, request: AssistRequest) -> str:
        self.calls.append(request)
        return self.answer


# ===== STANDARD FIXTURES =====

@pytest.fixture(scope="session")
def client():
    """FastAPI test client wired to a native-only orchestrator."""
    with TestClient(app) as test_client:
        app.state.orchestrator = ConversionOrchestrator(ConverterConfig())
        yield test_client


@pytest.fixture
def config():
    """Default converter configuration without an assist backend."""
    return ConverterConfig()


@pytest.fixture
def orchestrator(config):
    """Native-only orchestrator."""
    return ConversionOrchestrator(config)


@pytest.fixture
def failing_backend():
    """Assist backend that always fails."""
    return FailingAssistBackend()


@pytest.fixture
def failing_backend_class():
    """Factory for assist backends that fail with a given error."""
    return FailingAssistBackend


@pytest.fixture
def static_backend():
    """Factory for assist backends that always answer with the given text."""
    return StaticAssistBackend


@pytest.fixture
def failing_orchestrator(config, failing_backend):
    """Orchestrator whose assisted path always fails."""
    return ConversionOrchestrator(config, assist_backend=failing_backend)


# ===== SAMPLE DOCUMENTS =====

SAMPLE_DOCUMENTS = {
    "json": '{\n  "name": "Ana",\n  "age": 30,\n  "tags": [\n    "a",\n    "b"\n  ]\n}',
    "yaml": "name: Ana\nage: 30\ntags:\n  - a\n  - b\n",
    "xml": '<?xml version="1.0" encoding="utf-8"?>\n<person id="7">\n  <name>Ana</name>\n  <age>30</age>\n</person>',
    "csv": "name,age\nAna,30\nLeo,25\n",
}


@pytest.fixture(params=sorted(SAMPLE_DOCUMENTS))
def sample_document(request):
    """Parameterized fixture providing one valid document per format."""
    return {"format": request.param, "data": SAMPLE_DOCUMENTS[request.param]}
