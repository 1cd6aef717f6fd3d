"""
Request and result types for conversion, formatting and validation.

All of them are request-scoped: built for one user action and discarded once
the response is produced.
"""

from typing import Any, Dict, Optional

from .config import ConversionMethod, DataFormat


class ConversionRequest:
    """Text to convert and the formats to convert between."""

    def __init__(
        self,
        source_text: str,
        source_format: DataFormat,
        target_format: DataFormat,
        csv_strict: Optional[bool] = None
    ):
        self.source_text = source_text
        self.source_format = source_format
        self.target_format = target_format
        # None means "use the orchestrator's configured default"
        self.csv_strict = csv_strict

    @property
    def is_format_only(self) -> bool:
        return self.source_format == self.target_format

    def __repr__(self) -> str:
        return (
            f"ConversionRequest({self.source_format.value} -> {self.target_format.value}, "
            f"{len(self.source_text)} chars)"
        )


class ConversionResult:
    """Outcome of a convert or format call."""

    def __init__(
        self,
        success: bool,
        payload: Optional[str] = None,
        error: Optional[str] = None,
        method: Optional[ConversionMethod] = None,
        error_code: Optional[str] = None,
        stage: Optional[str] = None
    ):
        self.success = success
        self.payload = payload
        self.error = error
        self.method = method
        self.error_code = error_code
        self.stage = stage

    @classmethod
    def succeeded(cls, payload: str, method: ConversionMethod) -> "ConversionResult":
        return cls(success=True, payload=payload, method=method)

    @classmethod
    def failed(
        cls,
        error: str,
        error_code: str,
        method: Optional[ConversionMethod] = ConversionMethod.NATIVE,
        stage: Optional[str] = None
    ) -> "ConversionResult":
        return cls(success=False, error=error, method=method, error_code=error_code, stage=stage)

    def to_dict(self) -> Dict[str, Any]:
        """Wire payload: ``{success, data?, error?, method?}``."""
        body: Dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.payload
        else:
            body["error"] = self.error
        if self.method is not None:
            body["method"] = self.method.value
        return body

    def __repr__(self) -> str:
        method = self.method.value if self.method else None
        if self.success:
            return f"ConversionResult(success=True, method={method}, {len(self.payload)} chars)"
        return f"ConversionResult(success=False, method={method}, error={self.error!r})"


class ValidationOutcome:
    """Outcome of a validate call."""

    def __init__(self, valid: bool, message: str, method: Optional[ConversionMethod] = None, details: Optional[Dict[str, Any]] = None):
        self.valid = valid
        self.message = message
        self.method = method
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Wire payload: ``{valid, message, method?}``."""
        body: Dict[str, Any] = {"valid": self.valid, "message": self.message}
        if self.method is not None:
            body["method"] = self.method.value
        return body

    def __repr__(self) -> str:
        return f"ValidationOutcome(valid={self.valid}, message={self.message!r})"
