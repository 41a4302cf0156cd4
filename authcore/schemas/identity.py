from enum import StrEnum

from pydantic import ConfigDict, EmailStr, Field

from authcore.schemas.base import BaseSchema


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class Identity(BaseSchema):
    """Verified identity handed over by the external credential check"""

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        frozen=True,
    )

    user_id: str = Field(min_length=1)
    email: EmailStr
    display_name: str
    role: Role = Role.USER
