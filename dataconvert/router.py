"""
Conversion router for the /api endpoints.

Every route reads a JSON object body, hands it to the orchestrator stored on
``app.state`` and turns failures into the shared error response shape.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .config import FORMAT_MEDIA_TYPES, DataFormat, get_supported_formats
from .exceptions import DataConversionError
from .orchestrator import ConversionOrchestrator
from .utils.error_handling import ErrorCode, create_error_response, handle_conversion_error

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["conversions"])


def _get_orchestrator(request: Request) -> ConversionOrchestrator:
    return request.app.state.orchestrator


async def _read_body(request: Request) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Return the JSON object body, or an error message when it is not one."""
    try:
        body = await request.json()
    except ValueError:
        return None, "Request body must be valid JSON"
    if not isinstance(body, dict):
        return None, "Request body must be a JSON object"

    data = body.get("data")
    if data is not None and not isinstance(data, str):
        return None, "Field 'data' must be a string"
    strict = body.get("strict")
    if strict is not None and not isinstance(strict, bool):
        return None, "Field 'strict' must be a boolean"
    return body, None


#-- Convert between formats
#-------------------------------------------------------------------------------
@router.post("/convert")
async def convert_data(request: Request):
    """Convert ``data`` from ``fromFormat`` to ``toFormat``"""
    body, problem = await _read_body(request)
    if problem:
        return create_error_response(ErrorCode.INVALID_REQUEST, problem, success=False)

    orchestrator = _get_orchestrator(request)
    try:
        conversion = orchestrator.build_request(
            body.get("data"), body.get("fromFormat"), body.get("toFormat"), csv_strict=body.get("strict")
        )
        result = await orchestrator.convert(conversion)
    except DataConversionError as e:
        return handle_conversion_error(e, success=False)
    except Exception as e:
        logger.exception(f"Unexpected error during conversion: {e}")
        return create_error_response(ErrorCode.INTERNAL_ERROR, f"Conversion failed: {e}", success=False)

    if not result.success:
        return create_error_response(
            result.error_code, result.error,
            success=False, method=result.method.value, stage=result.stage
        )
    return JSONResponse(content=result.to_dict())


#-- Pretty-print within one format
#-------------------------------------------------------------------------------
@router.post("/format")
async def format_data(request: Request):
    """Re-emit ``data`` in its own ``format`` with canonical indentation"""
    body, problem = await _read_body(request)
    if problem:
        return create_error_response(ErrorCode.INVALID_REQUEST, problem, success=False)

    orchestrator = _get_orchestrator(request)
    try:
        result = await orchestrator.format(body.get("data"), body.get("format"), csv_strict=body.get("strict"))
    except DataConversionError as e:
        return handle_conversion_error(e, success=False)
    except Exception as e:
        logger.exception(f"Unexpected error during formatting: {e}")
        return create_error_response(ErrorCode.INTERNAL_ERROR, f"Formatting failed: {e}", success=False)

    if not result.success:
        return create_error_response(
            result.error_code, result.error,
            success=False, method=result.method.value, stage=result.stage
        )
    return JSONResponse(content=result.to_dict())


#-- Syntax validation
#-------------------------------------------------------------------------------
@router.post("/validate")
async def validate_data(request: Request):
    """Check that ``data`` is syntactically valid ``format``"""
    body, problem = await _read_body(request)
    if problem:
        return create_error_response(ErrorCode.INVALID_REQUEST, problem, valid=False, message=problem)

    orchestrator = _get_orchestrator(request)
    try:
        outcome = await orchestrator.validate(body.get("data"), body.get("format"), csv_strict=body.get("strict"))
    except DataConversionError as e:
        return handle_conversion_error(e, valid=False, message=e.message)
    except Exception as e:
        logger.exception(f"Unexpected error during validation: {e}")
        message = f"Validation failed: {e}"
        return create_error_response(ErrorCode.INTERNAL_ERROR, message, valid=False, message=message)

    return JSONResponse(content=outcome.to_dict())


#-- Supported formats
#-------------------------------------------------------------------------------
@router.get("/formats")
async def list_formats():
    """List supported formats, their accepted tokens and media types"""
    formats = get_supported_formats()
    return {
        "formats": [
            {
                "name": name,
                "tokens": tokens,
                "media_type": FORMAT_MEDIA_TYPES[DataFormat(name)],
            }
            for name, tokens in formats.items()
        ]
    }
