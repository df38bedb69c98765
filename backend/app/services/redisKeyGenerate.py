#builds the redis keys used by the profile cache and the token blocklist
import hashlib

PROFILE_KEY_PREFIX = "profile:"
BLOCKLIST_KEY_PREFIX = "jwt:blocklist:"


def generate_profile_key(identity: str) -> str:
    """Profile cache entries are stored per identity as JSON."""
    return f"{PROFILE_KEY_PREFIX}{identity}"


def generate_blocklist_key(jti: str) -> str:
    """
    Revoked token ids. The jti is hashed so the key length stays fixed
    whatever the token issuer puts in it.
    """
    digest = hashlib.sha256((jti or "").encode("utf-8")).hexdigest()
    return f"{BLOCKLIST_KEY_PREFIX}{digest}"
