"""Password and session-token hashing."""

import hashlib
import hmac
import secrets

from microblog.services.errors import CryptoUnavailableError

HASH_KEY = "Microblog"
MAX_HASH_INPUT = 4096
SALT_BYTES = 4


def calc_hash(text: str, seed: bytes) -> str:
    """Hex SHA-256 over ``seed + text + HASH_KEY``.

    Used both for the stored password hash (seeded with the startup salt)
    and for session tokens (seeded with fresh random bytes).
    """
    if len(text) > MAX_HASH_INPUT:
        raise ValueError("input text too long")
    h = hashlib.sha256()
    h.update(seed)
    h.update((text + HASH_KEY).encode("utf-8"))
    return h.hexdigest()


def random_bytes(n: int = SALT_BYTES) -> bytes:
    """Return *n* bytes from the system CSPRNG."""
    try:
        return secrets.token_bytes(n)
    except (OSError, NotImplementedError) as e:
        raise CryptoUnavailableError("couldn't read cryptographically secure rand") from e


def verify_password(password: str, password_hash: str, salt: bytes) -> bool:
    """Check *password* against the stored hash in constant time."""
    try:
        candidate = calc_hash(password, salt)
    except ValueError:
        return False
    return hmac.compare_digest(candidate, password_hash)
