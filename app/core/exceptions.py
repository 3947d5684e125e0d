import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.ai.errors import ContentNotFoundError, PipelineError, UpstreamError
from app.config import Settings

GENERATION_FAILED_MESSAGE = "Content generation failed"


def _coerce_json_safe(value: Any) -> Any:
  """Convert unsupported values into JSON-safe primitives for error responses."""
  # Keep native JSON primitives unchanged.
  if value is None or isinstance(value, bool | int | float | str):
    return value
  # Recursively sanitize mapping values so nested contexts remain serializable.
  if isinstance(value, dict):
    return {str(key): _coerce_json_safe(item) for key, item in value.items()}
  # Normalize iterable containers to lists for deterministic JSON encoding.
  if isinstance(value, list | tuple | set):
    return [_coerce_json_safe(item) for item in value]
  if isinstance(value, BaseException):
    error_message = str(value)
    if error_message:
      return f"{type(value).__name__}: {error_message}"
    return type(value).__name__
  return str(value)


def _error_payload(message: str, *, request_id: str | None = None, errors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
  """Build the failure envelope shared by every handler."""
  payload: dict[str, Any] = {"success": False, "message": message}
  if errors:
    payload["errors"] = errors
  # Attach a request id so support can correlate client reports to server logs.
  if request_id:
    payload["requestId"] = request_id
  return payload


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
  """Return validation errors without raw input payloads."""
  sanitized: list[dict[str, Any]] = []
  for error in errors:
    scrubbed = {key: value for key, value in error.items() if key not in {"input", "url"}}
    if "ctx" in scrubbed and isinstance(scrubbed["ctx"], dict):
      scrubbed_ctx = dict(scrubbed["ctx"])
      scrubbed_ctx.pop("input", None)
      scrubbed["ctx"] = scrubbed_ctx

    sanitized.append(_coerce_json_safe(scrubbed))

  return sanitized


def _validation_message(errors: list[dict[str, Any]]) -> str:
  """Summarize the first validation error as ``<field>: <reason>``."""
  if not errors:
    return "Invalid request"
  first = errors[0]
  location = [str(part) for part in first.get("loc", ()) if part != "body"]
  field = ".".join(location)
  reason = str(first.get("msg") or "Invalid value")
  return f"{field}: {reason}" if field else reason


def _http_detail_message(detail: Any) -> str:
  if isinstance(detail, str) and detail:
    return detail
  return "Request failed"


def _request_id(request: Request) -> str | None:
  return getattr(request.state, "request_id", None)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  """Global exception handler to catch unhandled errors."""
  logger = logging.getLogger("uvicorn.error")
  request_id = _request_id(request)
  logger.error("Global exception request_id=%s path=%s error_type=%s", request_id, request.url.path, type(exc).__name__, exc_info=True)
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload("Internal Server Error", request_id=request_id))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  """Reject malformed bodies with 400 and log the sanitized errors."""
  request_id = _request_id(request)
  sanitized_errors = _sanitize_validation_errors(exc.errors())
  logger = logging.getLogger("uvicorn.error")
  logger.warning("Request validation failed request_id=%s path=%s method=%s errors=%s", request_id, request.url.path, request.method, sanitized_errors)
  return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_payload(_validation_message(sanitized_errors), request_id=request_id, errors=sanitized_errors))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
  """Handle FastAPI HTTPExceptions while avoiding leaking internal diagnostics."""
  from app.config import get_settings

  settings: Settings = get_settings()
  request_id = _request_id(request)
  headers = getattr(exc, "headers", None)
  # Log 5xx HTTPExceptions with a traceback for diagnostics; do not expose `exc.detail` to callers.
  if exc.status_code >= 500:
    logger = logging.getLogger("uvicorn.error")
    logger.error("HTTPException request_id=%s path=%s status_code=%s detail=%s", request_id, request.url.path, exc.status_code, exc.detail, exc_info=True)
    return JSONResponse(status_code=exc.status_code, content=_error_payload("Internal Server Error", request_id=request_id), headers=headers)

  if settings.log_http_4xx:
    logger = logging.getLogger("uvicorn.error")
    logger.warning("HTTPException request_id=%s path=%s status_code=%s detail=%s", request_id, request.url.path, exc.status_code, _coerce_json_safe(exc.detail))

  return JSONResponse(status_code=exc.status_code, content=_error_payload(_http_detail_message(exc.detail), request_id=request_id), headers=headers)


async def content_not_found_exception_handler(request: Request, exc: ContentNotFoundError) -> JSONResponse:
  """Map unknown languages and lessons to 404."""
  request_id = _request_id(request)
  logger = logging.getLogger("uvicorn.error")
  logger.info("Content not found request_id=%s path=%s entity=%s id=%s", request_id, request.url.path, exc.entity, exc.entity_id)
  return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_payload(f"{exc.entity} not found", request_id=request_id))


async def pipeline_exception_handler(request: Request, exc: PipelineError) -> JSONResponse:
  """Return a generic server error for configuration and upstream model failures."""
  logger = logging.getLogger("uvicorn.error")
  request_id = _request_id(request)
  reason = exc.reason if isinstance(exc, UpstreamError) else None
  logger.error("Generation failure request_id=%s path=%s error_type=%s reason=%s", request_id, request.url.path, type(exc).__name__, reason, exc_info=True)
  # Model errors can echo prompt fragments; keep them out of the response.
  return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_error_payload(GENERATION_FAILED_MESSAGE, request_id=request_id))
