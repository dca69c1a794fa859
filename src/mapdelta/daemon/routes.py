"""HTTP routes for the mapdelta service.

Endpoints mirror the dashboard's expectations: multipart uploads for
analysis/comparison and id-based retrieval of stored comparisons.
"""

from __future__ import annotations

import importlib.metadata
import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any

import structlog
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from mapdelta.core.errors import ErrorCode, InputError, InternalError, MapDeltaError

if TYPE_CHECKING:
    from mapdelta.config.models import ServerConfig
    from mapdelta.ops import AnalysisService

log = structlog.get_logger(__name__)

Handler = Callable[[Request], Awaitable[JSONResponse]]

_STATUS_BY_CODE = {
    ErrorCode.INPUT_TOO_LARGE: 413,
    ErrorCode.INTERNAL_ERROR: 500,
}


def _get_version() -> str:
    """Get package version from installed metadata."""
    try:
        return importlib.metadata.version("mapdelta")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _error_response(exc: MapDeltaError) -> JSONResponse:
    return JSONResponse(exc.to_dict(), status_code=_STATUS_BY_CODE.get(exc.code, 400))


def _json_errors(handler: Handler) -> Handler:
    """Turn MapDeltaError into its JSON body; anything else becomes a 500."""

    @wraps(handler)
    async def wrapper(request: Request) -> JSONResponse:
        try:
            return await handler(request)
        except MapDeltaError as exc:
            log.warning("request_rejected", path=request.url.path, error=exc.error_name)
            return _error_response(exc)
        except Exception as exc:
            log.exception("request_failed", path=request.url.path)
            return _error_response(InternalError.unexpected(type(exc).__name__, error=str(exc)))

    return wrapper


# -----------------------------------------------------------------
# Query coercion: unparseable or negative values fall back to defaults
# -----------------------------------------------------------------


def query_int(request: Request, name: str) -> int | None:
    raw = request.query_params.get(name)
    if raw is None:
        return None
    try:
        value = int(raw, 0) if raw.lower().startswith("0x") else int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def query_float(request: Request, name: str) -> float | None:
    raw = request.query_params.get(name)
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if value != value or value < 0:  # NaN or negative
        return None
    return value


def query_bool(request: Request, name: str) -> bool:
    return request.query_params.get(name, "").lower() == "true"


async def read_uploads(request: Request, names: tuple[str, ...], max_bytes: int) -> list[str]:
    """Read the named multipart file fields as text.

    Raises:
        InputError: If a field is missing or a file exceeds ``max_bytes``.
    """
    form = await request.form()
    uploads: list[UploadFile] = []
    for name in names:
        upload = form.get(name)
        if not isinstance(upload, UploadFile):
            raise InputError.missing_field(*names)
        uploads.append(upload)

    texts: list[str] = []
    for name, upload in zip(names, uploads, strict=True):
        data = await upload.read()
        if len(data) > max_bytes:
            raise InputError.too_large(upload.filename or name, len(data), max_bytes)
        texts.append(data.decode("utf-8", errors="replace"))
    return texts


def create_routes(service: AnalysisService, server_config: ServerConfig) -> list[Route]:
    """Create HTTP routes bound to the analysis service."""
    start_time = time.time()
    version = _get_version()
    max_bytes = server_config.max_upload_mb * 1024 * 1024

    async def health(request: Request) -> JSONResponse:
        _ = request  # unused
        return JSONResponse(
            {
                "status": "healthy",
                "version": version,
                "uptime_seconds": round(time.time() - start_time, 1),
            }
        )

    @_json_errors
    async def analyze(request: Request) -> JSONResponse:
        """Parse a single uploaded map (field ``mapFile``)."""
        (text,) = await read_uploads(request, ("mapFile",), max_bytes)
        result = await run_in_threadpool(service.analyze, text)
        return JSONResponse(result.to_dict())

    @_json_errors
    async def compare(request: Request) -> JSONResponse:
        """Summary-compare ``fileA`` against ``fileB`` and store the result."""
        text_a, text_b = await read_uploads(request, ("fileA", "fileB"), max_bytes)
        options = service.compare_options(
            top_n=query_int(request, "topN"),
            anomaly_threshold_pct=query_float(request, "anomalyThresholdPct"),
            anomaly_threshold_bytes=query_int(request, "anomalyThresholdBytes"),
            include_unchanged=query_bool(request, "includeUnchanged"),
        )
        compare_id, result = await run_in_threadpool(service.compare, text_a, text_b, options)
        return JSONResponse({"compareId": compare_id, **result.to_dict()})

    @_json_errors
    async def compare_stats(request: Request) -> JSONResponse:
        _ = request  # unused
        return JSONResponse(service.stats())

    @_json_errors
    async def get_comparison(request: Request) -> JSONResponse:
        compare_id = request.path_params["compare_id"]
        stored = service.get_stored(compare_id)
        if stored is None:
            return JSONResponse(
                {"error": "Comparison not found or expired", "compareId": compare_id},
                status_code=404,
            )
        return JSONResponse({"compareId": compare_id, **stored})

    @_json_errors
    async def delete_comparison(request: Request) -> JSONResponse:
        compare_id = request.path_params["compare_id"]
        deleted = service.delete_stored(compare_id)
        return JSONResponse({"deleted": deleted}, status_code=200 if deleted else 404)

    @_json_errors
    async def diff(request: Request) -> JSONResponse:
        """Version-diff ``fileV1`` against ``fileV2`` and store the result."""
        text_v1, text_v2 = await read_uploads(request, ("fileV1", "fileV2"), max_bytes)
        options = service.diff_options(
            anomaly_growth_threshold=query_float(request, "growthThreshold"),
            anomaly_shrink_threshold=query_float(request, "shrinkThreshold"),
            address_shift_threshold=query_int(request, "addressShift"),
        )
        diff_id, result = await run_in_threadpool(service.diff, text_v1, text_v2, options)
        payload: dict[str, Any] = {"diffId": diff_id, **result.to_dict()}
        return JSONResponse(payload)

    return [
        Route("/health", health, methods=["GET"]),
        Route("/analyze", analyze, methods=["POST"]),
        Route("/compare", compare, methods=["POST"]),
        Route("/compare", compare_stats, methods=["GET"]),
        Route("/compare/{compare_id}", get_comparison, methods=["GET"]),
        Route("/compare/{compare_id}", delete_comparison, methods=["DELETE"]),
        Route("/diff", diff, methods=["POST"]),
    ]
