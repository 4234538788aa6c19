"""Profile endpoints for the authenticated member."""

from fastapi import APIRouter

from qcktlk_forum.api.v1.dependencies import CurrentIdentityDep, SessionDep
from qcktlk_forum.db.time import utcnow
from qcktlk_forum.models import User
from qcktlk_forum.schemas.user import ProfileUpdateRequest, QuotaResponse, UserResponse
from qcktlk_forum.services.quota import can_create_post
from qcktlk_forum.services.users import get_or_create_profile, update_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=UserResponse)
async def get_profile(identity: CurrentIdentityDep, db: SessionDep) -> User:
    """Return the caller's profile, creating a free-tier one on first access."""
    user = get_or_create_profile(
        db,
        identity.email,
        display_name=identity.name,
        photo_url=identity.picture,
    )
    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    return user


@router.post("/profile", response_model=UserResponse)
async def upsert_profile(
    profile_data: ProfileUpdateRequest,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> User:
    """Create or update the caller's display name and photo.

    Membership and role are left untouched.
    """
    user = get_or_create_profile(
        db,
        identity.email,
        display_name=identity.name,
        photo_url=identity.picture,
    )
    return update_profile(db, user, profile_data)


@router.get("/me/quota", response_model=QuotaResponse)
async def get_my_quota(identity: CurrentIdentityDep, db: SessionDep) -> QuotaResponse:
    """Report whether the caller may create another post."""
    decision = can_create_post(db, identity.email)
    return QuotaResponse(
        allowed=decision.allowed,
        post_count=decision.current_count,
        limit=decision.limit,
        membership=decision.membership,
    )
