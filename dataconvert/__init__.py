"""
dataconvert: convert, pretty-print and validate JSON, XML, YAML and CSV text.
"""

__version__ = "1.0.0"
