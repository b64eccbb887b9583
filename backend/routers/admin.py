"""
Admin API endpoints.
Requires the admin role for all operations.
"""

from fastapi import APIRouter, Depends, Query
import logging

from config.settings import settings
from schemas.user import User as UserSchema
from services.auth_service import require_role
from services.user_service import UserService, get_user_service
from utils.api_response import paginated_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ==================== User Management ====================


@router.get("/users", summary="List all users")
async def list_all_users(
    page: int = Query(1, ge=1, le=settings.MAX_PAGE),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: UserSchema = Depends(require_role("admin")),
    user_service: UserService = Depends(get_user_service),
):
    """Get all users, newest first. Admin only."""
    logger.info(f"list_all_users - admin_user_id={current_user.id}, page={page}, limit={limit}")

    users, total = await user_service.list_users(limit=limit, offset=(page - 1) * limit)
    logger.info(f"list_all_users complete - total={total}, returned={len(users)}")
    return paginated_response(
        [UserSchema.model_validate(u).model_dump(mode="json", by_alias=True) for u in users],
        page=page,
        limit=limit,
        total=total,
        message="Users retrieved successfully",
    )
