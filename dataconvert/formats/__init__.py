"""
Format codecs for the conversion core.
"""

from typing import Dict

from ..config import DEFAULT_XML_ROOT_NAME, DataFormat, normalize_format_token
from .base_codec import BaseCodec
from .csv import CSVCodec
from .json import JSONCodec
from .xml import XMLCodec
from .yaml import YAMLCodec

__all__ = ['BaseCodec', 'CSVCodec', 'JSONCodec', 'XMLCodec', 'YAMLCodec', 'create_codec_for_format', 'create_codecs']


def create_codec_for_format(format_name, xml_root_name: str = DEFAULT_XML_ROOT_NAME) -> BaseCodec:
    """
    Factory function to create the codec for a format.

    Args:
        format_name: A ``DataFormat`` or any accepted format token (json, xml, yaml, yml, csv)
        xml_root_name: Synthetic root element name used when serializing XML

    Returns:
        Codec instance for the format

    Raises:
        UnsupportedFormatError: If the format is not supported
    """
    data_format = normalize_format_token(format_name)

    format_codecs = {
        DataFormat.JSON: lambda: JSONCodec(),
        DataFormat.YAML: lambda: YAMLCodec(),
        DataFormat.XML: lambda: XMLCodec(root_name=xml_root_name),
        DataFormat.CSV: lambda: CSVCodec(),
    }

    return format_codecs[data_format]()


def create_codecs(xml_root_name: str = DEFAULT_XML_ROOT_NAME) -> Dict[DataFormat, BaseCodec]:
    """Create one codec per supported format."""
    return {fmt: create_codec_for_format(fmt, xml_root_name=xml_root_name) for fmt in DataFormat}
