"""Password hashing utilities (bcrypt)."""

import bcrypt


def hash_password(plaintext: str, rounds: int = 12) -> str:
    """Hash a password with a fresh salt.

    Args:
        plaintext: Password to hash
        rounds: bcrypt cost factor

    Returns:
        bcrypt hash as text
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")


def verify_password(plaintext: str, password_hash: str | None) -> bool:
    """Check a password against a stored hash.

    Returns False when there is no stored hash or the hash is malformed.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
