from functools import lru_cache

import bcrypt

from appointment_backend.core import config

# bcrypt ignores (or, in newer releases, rejects) input past this many bytes.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


@lru_cache(maxsize=1)
def _dummy_hash() -> bytes:
    return bcrypt.hashpw(b"appointment-dummy-password", bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS))


def verify_password(password: str, hashed_password: str | None) -> bool:
    """Check ``password`` against a stored hash.

    A missing hash still costs one bcrypt comparison so callers cannot tell
    an unknown account from a wrong password by timing.
    """
    password_bytes = password.encode("utf-8")
    if not hashed_password or len(password_bytes) > MAX_PASSWORD_BYTES:
        bcrypt.checkpw(password_bytes[:MAX_PASSWORD_BYTES], _dummy_hash())
        return False
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
