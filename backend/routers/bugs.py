"""
Bugs Router - REST endpoints for bug CRUD, listing and statistics.
"""

from fastapi import APIRouter, Body, Depends, Query, status
from typing import Any, Dict, Optional
import logging

from config.settings import settings
from schemas.bug import BugSchema
from schemas.user import User
from services import auth_service
from services.bug_service import BugService, get_bug_service
from utils.api_response import success_response, created_response, paginated_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bugs", tags=["bugs"])

SORT_PATTERN = "^(createdAt|updatedAt|title|status|priority|severity)$"


def _serialize(bug) -> dict:
    return BugSchema.model_validate(bug).to_json()


# =============================================================================
# Statistics (registered before /{bug_id} so "stats" is not taken as an id)
# =============================================================================

@router.get("/stats")
async def get_bug_stats(bug_service: BugService = Depends(get_bug_service)):
    """Total and per-status/priority/severity counts."""
    stats = await bug_service.stats()
    return success_response(stats.to_json(), "Statistics retrieved successfully")


# =============================================================================
# Bug CRUD
# =============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bug(
    payload: Dict[str, Any] = Body(...),
    current_user: Optional[User] = Depends(auth_service.get_optional_user),
    bug_service: BugService = Depends(get_bug_service),
):
    """Create a bug. Status is optional and defaults to open."""
    creator_id = current_user.id if current_user else None
    bug = await bug_service.create(payload, creator_id=creator_id)
    return created_response(_serialize(bug), "Bug created successfully")


@router.get("")
async def list_bugs(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = None,
    severity: Optional[str] = None,
    created_by: Optional[str] = Query(None, alias="createdBy"),
    page: int = Query(1, ge=1, le=settings.MAX_PAGE),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: str = Query("createdAt", alias="sortBy", pattern=SORT_PATTERN),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    bug_service: BugService = Depends(get_bug_service),
):
    """List bugs with exact-match filters, sorting and pagination."""
    filters = {
        "status": status_filter,
        "priority": priority,
        "severity": severity,
        "createdBy": created_by,
    }
    bugs, total = await bug_service.list(
        filters=filters,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
    )
    return paginated_response(
        [_serialize(b) for b in bugs],
        page=page,
        limit=limit,
        total=total,
        message="Bugs retrieved successfully",
    )


@router.get("/{bug_id}")
async def get_bug(
    bug_id: str,
    bug_service: BugService = Depends(get_bug_service),
):
    bug = await bug_service.get(bug_id)
    return success_response(_serialize(bug), "Bug retrieved successfully")


@router.put("/{bug_id}")
async def update_bug(
    bug_id: str,
    payload: Dict[str, Any] = Body(...),
    bug_service: BugService = Depends(get_bug_service),
):
    """Full replace: title, description, status, priority, severity and createdBy are all required."""
    bug = await bug_service.replace(bug_id, payload)
    return success_response(_serialize(bug), "Bug updated successfully")


@router.patch("/{bug_id}")
async def patch_bug(
    bug_id: str,
    payload: Dict[str, Any] = Body(...),
    bug_service: BugService = Depends(get_bug_service),
):
    """Status change, as sent by the board's drag and drop. Other fields are ignored."""
    bug = await bug_service.patch_status(bug_id, payload)
    return success_response(_serialize(bug), "Bug status updated successfully")


@router.delete("/{bug_id}")
async def delete_bug(
    bug_id: str,
    bug_service: BugService = Depends(get_bug_service),
):
    await bug_service.delete(bug_id)
    return success_response({}, "Bug deleted successfully")
