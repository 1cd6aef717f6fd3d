"""
Interface for generative assist backends.

An assist backend gets a task and the pasted data and returns free-form text.
Its output is never checked against the canonical model. Every failure is
reported as ``AssistedPathFailure`` so the orchestrator can fall back to the
native path.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from ..config import DataFormat


class AssistTask(Enum):
    """What the assist backend is asked to do."""
    CONVERT = "convert"
    FORMAT = "format"
    VALIDATE = "validate"


class AssistRequest:
    """One assisted call."""

    def __init__(
        self,
        task: AssistTask,
        data: str,
        source_format: DataFormat,
        target_format: Optional[DataFormat] = None
    ):
        self.task = task
        self.data = data
        self.source_format = source_format
        self.target_format = target_format or source_format

    def __repr__(self) -> str:
        return (
            f"AssistRequest({self.task.value}, {self.source_format.value} -> "
            f"{self.target_format.value}, {len(self.data)} chars)"
        )


class AssistBackend(ABC):
    """Base class for generative assist backends."""

    name = "assist"

    @abstractmethod
    async def try_convert(self, request: AssistRequest) -> str:
        """
        Ask the backend for an answer.

        Args:
            request: Task, data and formats

        Returns:
            The backend's answer text, stripped of surrounding whitespace

        Raises:
            AssistedPathFailure: On any failure (bad credential, timeout,
                non-2xx response, malformed or empty answer)
        """
        pass
