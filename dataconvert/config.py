"""
Configuration for the data conversion service.

This module defines the supported formats, the accepted format tokens and the
configuration values the orchestrator is constructed with. Only the application
entry point reads the environment; the conversion core always receives an
explicit ``ConverterConfig``.
"""

import os
from enum import Enum
from typing import Dict, List, Optional

from .exceptions import UnsupportedFormatError


class DataFormat(Enum):
    """Textual data formats the service understands."""
    JSON = "json"
    XML = "xml"
    YAML = "yaml"
    CSV = "csv"


class ConversionMethod(Enum):
    """Which path produced a result."""
    ASSISTED = "assisted"
    NATIVE = "native"


# Case-insensitive token -> format mapping
FORMAT_ALIASES: Dict[str, DataFormat] = {
    "json": DataFormat.JSON,
    "xml": DataFormat.XML,
    "yaml": DataFormat.YAML,
    "yml": DataFormat.YAML,
    "csv": DataFormat.CSV,
}

# Media types used when a caller wants to download converted output
FORMAT_MEDIA_TYPES: Dict[DataFormat, str] = {
    DataFormat.JSON: "application/json",
    DataFormat.XML: "application/xml",
    DataFormat.YAML: "application/yaml",
    DataFormat.CSV: "text/csv",
}

DEFAULT_XML_ROOT_NAME = "root"
DEFAULT_ASSIST_MODEL = "gpt-4o"
DEFAULT_ASSIST_BASE_URL = "https://api.openai.com/v1"
DEFAULT_ASSIST_TIMEOUT = 30.0


def normalize_format_token(token) -> DataFormat:
    """
    Resolve a user-supplied format token to a ``DataFormat``.

    Raises:
        UnsupportedFormatError: If the token is not recognized.
    """
    if isinstance(token, DataFormat):
        return token
    if not isinstance(token, str):
        raise UnsupportedFormatError(
            f"Unsupported format: {token!r}",
            details={"supported_formats": get_supported_tokens()}
        )
    data_format = FORMAT_ALIASES.get(token.strip().lower())
    if data_format is None:
        raise UnsupportedFormatError(
            f"Unsupported format: {token}. Supported formats: {get_supported_tokens()}",
            format_type=token,
            details={"supported_formats": get_supported_tokens()}
        )
    return data_format


def get_supported_tokens() -> List[str]:
    """All accepted format tokens, aliases included."""
    return sorted(FORMAT_ALIASES.keys())


def get_supported_formats() -> Dict[str, List[str]]:
    """Canonical format name -> accepted tokens."""
    formats: Dict[str, List[str]] = {fmt.value: [] for fmt in DataFormat}
    for token, data_format in FORMAT_ALIASES.items():
        formats[data_format.value].append(token)
    return formats


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


class AssistConfig:
    """Settings for the OpenAI-compatible assist backend."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ASSIST_MODEL,
        base_url: str = DEFAULT_ASSIST_BASE_URL,
        timeout: float = DEFAULT_ASSIST_TIMEOUT
    ):
        """
        Initialize assist configuration.

        Args:
            api_key: Bearer credential for the chat completions endpoint
            model: Model name sent with each request
            base_url: API base URL, without the ``/chat/completions`` suffix
            timeout: Seconds to wait for the single round-trip
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> Optional["AssistConfig"]:
        """Create assist config from environment variables, or None without a key."""
        api_key = os.getenv("OPENAI_API_KEY", "")
        if not api_key:
            return None
        return cls(
            api_key=api_key,
            model=os.getenv("DATACONVERT_ASSIST_MODEL", DEFAULT_ASSIST_MODEL),
            base_url=os.getenv("DATACONVERT_ASSIST_BASE_URL", DEFAULT_ASSIST_BASE_URL),
            timeout=float(os.getenv("DATACONVERT_ASSIST_TIMEOUT", str(DEFAULT_ASSIST_TIMEOUT)))
        )

    def __repr__(self) -> str:
        return f"AssistConfig(model={self.model!r}, base_url={self.base_url!r}, timeout={self.timeout})"


class ConverterConfig:
    """Process-wide settings handed to the orchestrator at construction time."""

    def __init__(
        self,
        assist: Optional[AssistConfig] = None,
        csv_strict: bool = False,
        xml_root_name: str = DEFAULT_XML_ROOT_NAME
    ):
        self.assist = assist
        self.csv_strict = csv_strict
        self.xml_root_name = xml_root_name

    @property
    def assist_enabled(self) -> bool:
        return self.assist is not None

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        """Create converter config from environment variables."""
        assist = AssistConfig.from_env() if _env_flag("DATACONVERT_ASSIST_ENABLED") else None
        return cls(
            assist=assist,
            csv_strict=_env_flag("DATACONVERT_CSV_STRICT"),
            xml_root_name=os.getenv("DATACONVERT_XML_ROOT_NAME", DEFAULT_XML_ROOT_NAME)
        )
