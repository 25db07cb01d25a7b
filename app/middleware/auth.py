"""
Taste Palette API - Authentication Middleware.

Bearer token verification backed by stored sessions.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.models.mongodb import SessionDocument, UserDocument, utcnow
from app.services.auth import verify_token
from app.utils.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class CurrentSession:
    """Authenticated request context."""

    user: UserDocument
    session: SessionDocument


def parse_object_id(value: Optional[str]) -> Optional[PydanticObjectId]:
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        return None


async def resolve_session(token: str) -> Optional[CurrentSession]:
    """
    Load the session and user behind an access token.

    The user row is re-fetched on every call. A session whose user no
    longer exists is deleted and treated as absent.

    Args:
        token: Raw bearer token.

    Returns:
        Optional[CurrentSession]: None when the token, session or user
        is missing or expired.
    """
    payload = verify_token(token)
    if not payload:
        return None

    user_id = parse_object_id(payload.get("sub"))
    session_id = parse_object_id(payload.get("sid"))
    if not user_id or not session_id:
        return None

    session = await SessionDocument.get(session_id)
    if not session or session.user_id != user_id:
        return None
    if session.expires_at <= utcnow():
        await session.delete()
        return None

    user = await UserDocument.get(user_id)
    if not user:
        logger.info(f"Dropping session {session_id} for deleted user {user_id}")
        await session.delete()
        return None

    return CurrentSession(user=user, session=session)


class JWTBearer(HTTPBearer):
    """
    JWT Bearer token authentication.

    Custom HTTPBearer that resolves the stored session on protected routes.

    Attributes:
        required: Raise AuthenticationError instead of returning None.
    """

    def __init__(self, required: bool = True):
        super().__init__(auto_error=False)
        self.required = required

    async def __call__(self, request: Request) -> Optional[CurrentSession]:
        """
        Verify the bearer token from the Authorization header.

        Args:
            request: FastAPI request object.

        Returns:
            Optional[CurrentSession]: Session context if valid.

        Raises:
            AuthenticationError: 401 if required and the token is unusable.
        """
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)

        current = None
        if credentials and credentials.scheme.lower() == "bearer":
            current = await resolve_session(credentials.credentials)

        if current is None:
            if self.required:
                raise AuthenticationError()
            return None

        request.state.user_id = str(current.user.id)
        return current


jwt_bearer = JWTBearer()
optional_jwt_bearer = JWTBearer(required=False)
