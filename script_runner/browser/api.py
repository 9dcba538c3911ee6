"""
Script execution API endpoint.
"""
import json
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import BrowserConnectionError, ScriptValidationError
from ..logging_config import get_logger
from .executor import ScriptExecutor
from .models import BrowserSession
from .provider import BrowserSessionProvider

logger = get_logger("script_runner.browser.api")

router = APIRouter(tags=["scripts"])

SCRIPT_LOG_PREVIEW = 500


# ==================== Request / Response Models ====================

class ExecuteScriptResponse(BaseModel):
    result: Any = None


class ErrorResponse(BaseModel):
    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_script(request: Request) -> str:
    """Pull a non-blank ``script`` string out of the JSON body."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ScriptValidationError()
    if not isinstance(body, dict):
        raise ScriptValidationError()

    script = body.get("script")
    if not isinstance(script, str) or not script.strip():
        raise ScriptValidationError()
    return script


# ==================== Endpoint ====================

@router.post(
    "/execute-script",
    response_model=ExecuteScriptResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def execute_script(request: Request):
    """Run a script against a fresh browser session and return its result."""
    provider: BrowserSessionProvider = request.app.state.provider
    executor: ScriptExecutor = request.app.state.executor
    request_id = getattr(request.state, "request_id", None)

    try:
        script = await _read_script(request)
    except ScriptValidationError as e:
        logger.warning_with("Rejected request without a usable script", request_id=request_id)
        return _error(400, str(e))

    logger.debug_with("Received script", request_id=request_id, script=script[:SCRIPT_LOG_PREVIEW])

    session: Optional[BrowserSession] = None
    try:
        try:
            session = await provider.acquire()
        except BrowserConnectionError as e:
            return _error(503, str(e))

        outcome = await executor.run(script, browser=session.browser, chromium=provider.chromium)
        if not outcome.ok:
            return _error(500, f"Script execution failed: {outcome.error}")

        payload = {"result": jsonable_encoder(outcome.value)}
        logger.info_with(
            "Script completed",
            request_id=request_id,
            session_id=session.id,
            duration_ms=round(outcome.duration_ms, 1),
        )
        return JSONResponse(status_code=200, content=payload)

    except Exception as e:
        logger.error_with(f"Unexpected server error: {e}", exc_info=True, request_id=request_id)
        return _error(500, f"Internal server error: {e}")

    finally:
        if session is not None:
            await provider.release(session)
