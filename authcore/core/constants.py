class StoreKeyPrefix:
    """
    Centralized registry of revocation store key prefixes.

    Key formats are shared with any other deployment reading the same store,
    so they must stay exactly ``refresh:{user_id}`` and ``blacklist:{fingerprint}``.

    Example:
        ```python
        from authcore.core.constants import StoreKeyPrefix

        key = StoreKeyPrefix.refresh_key("42")
        # Result: "refresh:42"
        ```
    """

    # Single active refresh token per user
    REFRESH = "refresh:"

    # Revoked access tokens, keyed by token fingerprint
    BLACKLIST = "blacklist:"

    @classmethod
    def refresh_key(cls, user_id: str) -> str:
        return f"{cls.REFRESH}{user_id}"

    @classmethod
    def blacklist_key(cls, fingerprint: str) -> str:
        return f"{cls.BLACKLIST}{fingerprint}"


class TokenType:
    ACCESS = "access"
    REFRESH = "refresh"


# Value stored under a blacklist key; only its presence matters
BLACKLIST_MARKER = "revoked"
