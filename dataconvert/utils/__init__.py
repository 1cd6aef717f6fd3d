"""
Shared utilities: logging setup, error responses and HTTP clients.
"""
