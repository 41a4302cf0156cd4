from typing import Literal

from pydantic import Field

from authcore.schemas.base import BaseSchema
from authcore.schemas.identity import Identity, Role


class Token(BaseSchema):
    """Token response schema"""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: str | None = None

    def __str__(self):
        return self.token_type + " " + self.access_token


class TokenPair(Token):
    """Access and refresh token minted together"""

    refresh_token: str


class _IdentityClaims(BaseSchema):
    sub: str = Field(min_length=1)
    email: str
    name: str
    role: Role
    iat: int
    exp: int
    jti: str

    def to_identity(self) -> Identity:
        return Identity(
            user_id=self.sub,
            email=self.email,
            display_name=self.name,
            role=self.role,
        )


class AccessTokenClaims(_IdentityClaims):
    """Access token payload"""

    type: Literal["access"]


class RefreshTokenClaims(_IdentityClaims):
    """Refresh token payload, carries the identity snapshot needed for rotation"""

    type: Literal["refresh"]
