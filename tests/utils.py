import json
from datetime import UTC, datetime, timedelta

from jose.utils import base64url_decode, base64url_encode

B64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


class FrozenClock:
    """
    Deterministic clock for token lifetimes.

    Starts on a whole second so that ``t=0`` of a scenario matches the
    ``iat`` written into the token.
    """

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 1, 1, tzinfo=UTC)
        self.start = self.current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current

    def at(self, seconds: float) -> datetime:
        """Jump to ``seconds`` after the start."""
        self.current = self.start + timedelta(seconds=seconds)
        return self.current


def tamper_signature(token: str, position: int = 0) -> str:
    """
    Swap one signature character for its neighbour in the base64url alphabet.

    At the last position of an HS256 signature only the unused low bits
    change, so the result decodes to the same signature bytes.
    """
    header, payload, signature = token.split(".")
    chars = list(signature)
    chars[position] = B64URL_ALPHABET[B64URL_ALPHABET.index(chars[position]) ^ 1]
    return f"{header}.{payload}.{''.join(chars)}"


def tamper_payload(token: str, **changes) -> str:
    """Rewrite payload claims while keeping the original header and signature."""
    header, payload, signature = token.split(".")
    claims = json.loads(base64url_decode(payload.encode()))
    claims.update(changes)
    new_payload = base64url_encode(json.dumps(claims).encode()).decode()
    return f"{header}.{new_payload}.{signature}"
