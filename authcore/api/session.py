from functools import lru_cache

from loguru import logger

from authcore.core.config import settings
from authcore.core.exceptions.domain import InvalidSignatureError, MalformedTokenError
from authcore.schemas import AccessTokenClaims, Identity, TokenPair
from authcore.services.store import build_revocation_store
from authcore.services.token_service import TokenService

CREDENTIALS_ERROR = "Could not validate credentials"


class SessionBoundary:
    """
    Entry points for the HTTP layer: issue, verify, refresh, revoke.

    Receives identities that were already authenticated elsewhere, or raw
    token strings. A bad signature is reported exactly like a malformed token
    so callers cannot tell which part of a forged token was wrong.
    """

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def issue(self, identity: Identity) -> TokenPair:
        return await self.token_service.issue(identity)

    async def verify(self, token: str) -> AccessTokenClaims:
        try:
            return await self.token_service.verify(token)
        except InvalidSignatureError as e:
            logger.warning(f"Access token failed signature check: {e.exception}")
            raise MalformedTokenError(CREDENTIALS_ERROR)

    async def refresh(self, refresh_token: str) -> TokenPair:
        try:
            return await self.token_service.refresh(refresh_token)
        except InvalidSignatureError as e:
            logger.warning(f"Refresh token failed signature check: {e.exception}")
            raise MalformedTokenError(CREDENTIALS_ERROR)

    async def revoke(self, access_token: str, user_id: str) -> None:
        # A bad access token still ends the session, TokenService absorbs it
        await self.token_service.revoke(access_token, user_id)


@lru_cache
def get_session_boundary() -> SessionBoundary:
    """
    Process-wide session boundary built from settings.

    Returns:
        SessionBoundary: Shared instance
    """
    store = build_revocation_store(settings)
    return SessionBoundary(TokenService(store))
