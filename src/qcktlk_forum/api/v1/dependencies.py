"""Shared API dependencies for authentication and common functionality."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from qcktlk_forum.db.session import get_db
from qcktlk_forum.models import User
from qcktlk_forum.services.identity import (
    IdentityError,
    IdentityVerifier,
    VerifiedIdentity,
    get_identity_verifier,
)

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for identity tokens
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_identity_verifier_dep() -> IdentityVerifier:
    """Return the shared identity verifier."""
    return get_identity_verifier()


IdentityVerifierDep = Annotated[IdentityVerifier, Depends(get_identity_verifier_dep)]


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    verifier: IdentityVerifierDep,
) -> VerifiedIdentity:
    """Resolve the verified identity behind the request's bearer token.

    Raises:
        HTTPException: 401 if the token is missing or cannot be verified.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized access",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return verifier.verify(credentials.credentials)
    except IdentityError as err:
        logger.info("Rejected identity token: %s", err)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err


# Type alias for current identity dependency
CurrentIdentityDep = Annotated[VerifiedIdentity, Depends(get_current_identity)]


def get_current_admin(identity: CurrentIdentityDep, db: SessionDep) -> User:
    """Return the caller's account if it holds the admin role.

    Raises:
        HTTPException: 403 if the caller has no account or is not an admin.
    """
    user = db.query(User).filter(User.email == identity.email).first()
    if user is None or not user.is_admin:
        logger.warning("Admin access denied for %s", identity.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required",
        )
    return user


AdminDep = Annotated[User, Depends(get_current_admin)]


def ensure_matches_identity(claimed: str | None, identity: VerifiedIdentity, field: str) -> None:
    """Reject body-supplied identity fields that disagree with the token.

    Raises:
        HTTPException: 403 if `claimed` is set and differs from the identity.
    """
    if claimed is None:
        return
    if claimed.strip().lower() not in {identity.email, identity.uid.lower()}:
        logger.warning("Identity mismatch on %s for %s", field, identity.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{field} does not match the authenticated user",
        )
