from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from authcore.api.session import CREDENTIALS_ERROR, SessionBoundary, get_session_boundary
from authcore.core.exceptions.domain import (
    StoreUnavailableError,
    TokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from authcore.core.exceptions.http_exceptions import (
    ServiceUnavailableException,
    UnauthorizedException,
)
from authcore.schemas import AccessTokenClaims

# OAuth2 password bearer scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


async def get_current_claims(
    token: Annotated[str, Depends(oauth2_scheme)],
    boundary: Annotated[SessionBoundary, Depends(get_session_boundary)],
) -> AccessTokenClaims:
    """
    Get the claims of the current bearer access token

    Args:
        token: JWT access token
        boundary: Session boundary

    Returns:
        Verified access token claims

    Raises:
        UnauthorizedException: If the token is malformed, expired or revoked
        ServiceUnavailableException: If the revocation store cannot be reached
    """
    try:
        return await boundary.verify(token)
    except TokenExpiredError:
        raise UnauthorizedException(detail="Token has expired", headers=BEARER_CHALLENGE)
    except TokenRevokedError:
        raise UnauthorizedException(detail="Token has been revoked", headers=BEARER_CHALLENGE)
    except TokenError:
        raise UnauthorizedException(detail=CREDENTIALS_ERROR, headers=BEARER_CHALLENGE)
    except StoreUnavailableError:
        raise ServiceUnavailableException(detail="Authentication temporarily unavailable")
