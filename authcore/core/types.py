from typing import TypedDict


class IdentityClaimsDict(TypedDict):
    """Identity fields carried by both token kinds."""

    sub: str  # Subject (user ID)
    email: str
    name: str
    role: str
