import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Optional, TypeVar

from loguru import logger
from pydantic import ValidationError

from authcore.core.config import settings
from authcore.core.constants import BLACKLIST_MARKER, StoreKeyPrefix, TokenType
from authcore.core.exceptions.domain import (
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from authcore.core.security import (
    decode_token,
    encode_token,
    is_expired,
    seconds_remaining,
    token_fingerprint,
)
from authcore.core.types import IdentityClaimsDict
from authcore.schemas import AccessTokenClaims, Identity, RefreshTokenClaims, TokenPair
from authcore.services.store import RevocationStore

ClaimsT = TypeVar("ClaimsT", AccessTokenClaims, RefreshTokenClaims)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """
    Token lifecycle: issuance, verification, refresh rotation and revocation.

    Holds no per-user state in process. Everything that must survive between
    requests lives in the revocation store:

    - ``refresh:{user_id}`` holds the single active refresh token of a user.
      Issuing or refreshing overwrites it, which is what invalidates the
      previous refresh token.
    - ``blacklist:{fingerprint}`` marks a revoked access token until the
      moment it would have expired anyway.

    Raises token errors (MalformedTokenError, InvalidSignatureError,
    TokenExpiredError, TokenRevokedError) which callers treat as terminal, and
    StoreUnavailableError, which is surfaced unchanged.
    """

    def __init__(
        self,
        store: RevocationStore,
        *,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_ttl_seconds: Optional[int] = None,
        refresh_ttl_seconds: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if secret_key is None:
            secret_key = settings.secret_key
        if algorithm is None:
            algorithm = settings.jwt_algorithm
        if access_ttl_seconds is None:
            access_ttl_seconds = settings.access_token_expire_seconds
        if refresh_ttl_seconds is None:
            refresh_ttl_seconds = settings.refresh_token_expire_seconds

        if not secret_key:
            raise ValueError("Signing secret must not be empty")
        if access_ttl_seconds <= 0 or refresh_ttl_seconds <= 0:
            raise ValueError("Token lifetimes must be positive")

        self.store = store
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_ttl_seconds = access_ttl_seconds
        self.refresh_ttl_seconds = refresh_ttl_seconds
        self._clock = clock or _utc_now

    def _mint_pair(self, identity: Identity) -> TokenPair:
        issued_at = self._clock()
        identity_claims = IdentityClaimsDict(
            sub=identity.user_id,
            email=identity.email,
            name=identity.display_name,
            role=identity.role.value,
        )

        access_token = encode_token(
            {**identity_claims, "type": TokenType.ACCESS, "jti": uuid.uuid4().hex},
            self.secret_key,
            self.access_ttl_seconds,
            issued_at=issued_at,
            algorithm=self.algorithm,
        )
        refresh_token = encode_token(
            {**identity_claims, "type": TokenType.REFRESH, "jti": uuid.uuid4().hex},
            self.secret_key,
            self.refresh_ttl_seconds,
            issued_at=issued_at,
            algorithm=self.algorithm,
        )

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def _decode(self, token: str, claims_model: type[ClaimsT]) -> ClaimsT:
        payload = decode_token(token, self.secret_key, algorithms=(self.algorithm,))

        try:
            return claims_model.model_validate(payload)
        except ValidationError as e:
            raise MalformedTokenError("Token has invalid claims", e)

    async def issue(self, identity: Identity) -> TokenPair:
        """
        Issue a fresh access/refresh pair for an authenticated identity.

        Any refresh token previously issued to the same user stops being
        usable: one active session per user.

        Args:
            identity: Verified identity.

        Returns:
            TokenPair with access and refresh tokens.

        Raises:
            StoreUnavailableError: If the refresh token could not be stored.
        """
        pair = self._mint_pair(identity)
        await self.store.put(
            StoreKeyPrefix.refresh_key(identity.user_id),
            pair.refresh_token,
            self.refresh_ttl_seconds,
        )

        logger.info(f"Token pair issued for user {identity.user_id}")
        return pair

    async def verify(self, access_token: str) -> AccessTokenClaims:
        """
        Validate an access token and return its claims.

        Validates, in order:
        - Structure and signature
        - Token type is "access" and all claims are present
        - Token is not blacklisted
        - Token is not past its expiry

        Args:
            access_token: JWT access token string.

        Returns:
            Decoded access token claims.

        Raises:
            MalformedTokenError: If the token cannot be parsed or has invalid claims.
            InvalidSignatureError: If the signature does not verify.
            TokenRevokedError: If the token was revoked.
            TokenExpiredError: If the token has expired.
            StoreUnavailableError: If the blacklist could not be checked.
        """
        claims = self._decode(access_token, AccessTokenClaims)

        fingerprint = token_fingerprint(access_token)
        if await self.store.exists(StoreKeyPrefix.blacklist_key(fingerprint)):
            raise TokenRevokedError()

        if is_expired(claims.exp, self._clock()):
            raise TokenExpiredError()

        return claims

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Rotate a refresh token into a brand-new token pair.

        The presented token must be exactly the one stored for its user. A
        token superseded by a later issue/refresh is rejected as revoked even
        when it has not expired yet. The identity is taken from the snapshot
        in the refresh claims, so no user lookup is needed.

        Args:
            refresh_token: JWT refresh token string.

        Returns:
            TokenPair with new access and refresh tokens.

        Raises:
            MalformedTokenError: If the token cannot be parsed or has invalid claims.
            InvalidSignatureError: If the signature does not verify.
            TokenRevokedError: If the token is no longer the active one for its user.
            TokenExpiredError: If the token has expired.
            StoreUnavailableError: If the store could not be read or written.
        """
        claims = self._decode(refresh_token, RefreshTokenClaims)
        key = StoreKeyPrefix.refresh_key(claims.sub)
        now = self._clock()

        stored = await self.store.get(key)
        if stored != refresh_token:
            if stored is None and is_expired(claims.exp, now):
                raise TokenExpiredError("Refresh token has expired")

            logger.warning(f"Rejected superseded or revoked refresh token for user {claims.sub}")
            raise TokenRevokedError("Refresh token has been revoked")

        if is_expired(claims.exp, now):
            raise TokenExpiredError("Refresh token has expired")

        pair = self._mint_pair(claims.to_identity())
        if not await self.store.swap(key, refresh_token, pair.refresh_token, self.refresh_ttl_seconds):
            logger.warning(f"Concurrent refresh lost the rotation race for user {claims.sub}")
            raise TokenRevokedError("Refresh token has been revoked")

        logger.info(f"Token pair rotated for user {claims.sub}")
        return pair

    async def revoke(self, access_token: str, user_id: str) -> None:
        """
        Log a user out.

        The user's refresh token is deleted unconditionally. The access token
        is then blacklisted for the rest of its lifetime if it can be decoded;
        a malformed or foreign access token does not stop the logout.
        Revoking twice is harmless.

        Args:
            access_token: JWT access token string being retired.
            user_id: User whose session ends.

        Raises:
            StoreUnavailableError: If the store could not be written.
        """
        await self.store.delete(StoreKeyPrefix.refresh_key(user_id))

        try:
            claims = self._decode(access_token, AccessTokenClaims)
        except TokenError as e:
            logger.info(f"Access token not blacklisted for user {user_id}: {e.message}")
            return

        ttl_seconds = seconds_remaining(claims.exp, self._clock())
        if ttl_seconds > 0:
            fingerprint = token_fingerprint(access_token)
            await self.store.put(
                StoreKeyPrefix.blacklist_key(fingerprint),
                BLACKLIST_MARKER,
                ttl_seconds,
            )
            logger.info(f"Access token revoked: {fingerprint[:8]}... (TTL: {ttl_seconds}s)")

        logger.info(f"Session revoked for user {user_id}")
