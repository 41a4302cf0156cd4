from .base import BaseSchema
from .identity import Identity, Role
from .token import AccessTokenClaims, RefreshTokenClaims, Token, TokenPair

__all__ = [
    "BaseSchema",
    "Identity",
    "Role",
    "Token",
    "TokenPair",
    "AccessTokenClaims",
    "RefreshTokenClaims",
]
