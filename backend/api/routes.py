"""API route definitions for JJ Viewer."""

import logging

from fastapi import APIRouter, HTTPException

from models.change import (
    GreetRequest,
    GreetResponse,
    JJChange,
    JJChangeListResponse,
    RepoPathRequest,
    RepoValidationResponse,
)
from services.repo_service import get_jj_changes, greet, validate_jj_repo
from utils.errors import (
    JJViewerError,
    PathValidationError,
    PermissionDenied,
    RepositoryError,
    ToolNotFound,
    ToolTimedOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _status_for(error: JJViewerError) -> int:
    if isinstance(error, (PathValidationError, RepositoryError)):
        return 400
    if isinstance(error, ToolTimedOut):
        return 408
    if isinstance(error, PermissionDenied):
        return 403
    if isinstance(error, ToolNotFound):
        return 503
    return 502


def _to_http_exception(error: JJViewerError) -> HTTPException:
    status_code = _status_for(error)
    logger.info("Request failed with %s (%d): %s", error.kind, status_code, error.message)
    return HTTPException(
        status_code=status_code,
        detail=error.message,
        headers={"X-Error-Kind": error.kind},
    )


@router.get("/health")
async def health_check() -> dict:
    """
    Lightweight endpoint for uptime checks.

    Returns:
        dict: Health status payload.
    """
    return {"status": "healthy"}


# ============================================================================
# REPOSITORY ENDPOINTS
# ============================================================================


@router.post("/repos/validate", response_model=RepoValidationResponse)
async def validate_repo(payload: RepoPathRequest) -> RepoValidationResponse:
    """
    Validate that a local path is a JJ repository.

    Request body:
        {"path": "/home/me/src/project"}

    Returns:
        RepoValidationResponse: The path as sent and ``valid: true``.

    Raises:
        HTTPException: 400 if the path or repository layout is invalid.
        HTTPException: 403/408/502/503 if running jj fails.
    """
    try:
        valid = await validate_jj_repo(payload.path)
        return RepoValidationResponse(path=payload.path, valid=valid)
    except JJViewerError as e:
        raise _to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/repos/changes", response_model=JJChangeListResponse)
async def list_repo_changes(payload: RepoPathRequest) -> JJChangeListResponse:
    """
    Retrieve the most recent changes of a JJ repository.

    Request body:
        {"path": "/home/me/src/project"}

    Returns:
        JJChangeListResponse: Changes in jj's order, newest first.

    Raises:
        HTTPException: 400 if the path or repository layout is invalid.
        HTTPException: 502 if jj fails or its output has no valid entries.
    """
    try:
        changes = await get_jj_changes(payload.path)
        return JJChangeListResponse(items=changes)
    except JJViewerError as e:
        raise _to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# COMMAND-STYLE ENDPOINTS
# ============================================================================
# Same operations under the names the desktop frontend invokes.


@router.post("/validate_jj_repo", response_model=bool)
async def validate_jj_repo_command(payload: RepoPathRequest) -> bool:
    try:
        return await validate_jj_repo(payload.path)
    except JJViewerError as e:
        raise _to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/get_jj_changes", response_model=list[JJChange])
async def get_jj_changes_command(payload: RepoPathRequest) -> list[JJChange]:
    try:
        return await get_jj_changes(payload.path)
    except JJViewerError as e:
        raise _to_http_exception(e)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/greet", response_model=GreetResponse)
async def greet_command(payload: GreetRequest) -> GreetResponse:
    return GreetResponse(message=greet(payload.name))
