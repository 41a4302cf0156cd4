import hashlib
import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any, Optional

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError
from jose.utils import base64url_decode, base64url_encode

from authcore.core.exceptions.domain import InvalidSignatureError, MalformedTokenError

# Expiry is a policy decision of the caller, the codec never enforces it
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
}


def _is_canonical_segment(segment: str) -> bool:
    """
    Whether a base64url segment is the one and only encoding of its bytes.

    The decoder ignores the unused low bits of the last character and skips
    characters outside the alphabet, so several strings decode to the same
    bytes. Only the canonical one is accepted.
    """
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except (UnicodeEncodeError, ValueError):
        return False

    return base64url_encode(raw).decode("ascii") == segment


def encode_token(
    claims: Mapping[str, Any],
    secret: str,
    ttl_seconds: int,
    *,
    issued_at: Optional[datetime] = None,
    algorithm: str = "HS256",
) -> str:
    """
    Encode claims into a signed compact JWT.

    Args:
        claims: Payload claims (without iat/exp)
        secret: Shared HMAC secret
        ttl_seconds: Token lifetime, exp = iat + ttl_seconds
        issued_at: Issuance time, defaults to now
        algorithm: HMAC algorithm (HS256, HS384 or HS512)

    Returns:
        Encoded JWT token

    Raises:
        ValueError: If ttl_seconds is not positive
    """
    if ttl_seconds <= 0:
        raise ValueError("Token lifetime must be positive")

    if issued_at is None:
        issued_at = datetime.now(UTC)

    iat = int(issued_at.timestamp())
    to_encode = dict(claims)
    to_encode.update(iat=iat, exp=iat + ttl_seconds)

    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    *,
    algorithms: Sequence[str] = ("HS256",),
) -> dict[str, Any]:
    """
    Decode a compact JWT after verifying its signature.

    The structure is checked first so that garbage input is reported as
    malformed, while a well-formed token whose MAC does not match (tampered
    payload, wrong key, disallowed alg) is reported as an invalid signature.
    Each segment must be canonical base64url, so an accepted token has exactly
    one string form and its fingerprint cannot be dodged.

    Args:
        token: Compact JWT string
        secret: Shared HMAC secret
        algorithms: Accepted algorithms

    Returns:
        Decoded claims

    Raises:
        MalformedTokenError: If the token cannot be parsed
        InvalidSignatureError: If the signature does not verify
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise MalformedTokenError("Token must have three dot-separated segments")

    try:
        jwt.get_unverified_header(token)
        jwt.get_unverified_claims(token)
    except JWTError as e:
        raise MalformedTokenError("Malformed token", e)

    header, payload, signature = token.split(".")
    if not (_is_canonical_segment(header) and _is_canonical_segment(payload)):
        raise MalformedTokenError("Token segments are not canonical base64url")
    if not _is_canonical_segment(signature):
        raise InvalidSignatureError("Token signature is not canonical base64url")

    try:
        return jwt.decode(token, secret, algorithms=list(algorithms), options=_DECODE_OPTIONS)
    except JWTClaimsError as e:
        raise MalformedTokenError("Token has invalid claims", e)
    except JWTError as e:
        raise InvalidSignatureError(exception=e)


def token_fingerprint(token: str) -> str:
    """
    SHA-256 of the full compact token, used as its blacklist key.

    decode_token only accepts canonical segments, so every token it accepts
    has a single string form and therefore a single fingerprint.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_expired(exp: int, now: datetime) -> bool:
    """Validity window is [iat, exp), so now == exp is already expired."""
    return now.timestamp() >= exp


def seconds_remaining(exp: int, now: datetime) -> int:
    """Whole seconds until exp, rounded up so a blacklist entry never lapses early."""
    return max(0, math.ceil(exp - now.timestamp()))
