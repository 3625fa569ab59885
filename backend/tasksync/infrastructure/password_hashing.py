"""Password Hashing - bcrypt, run off the event loop.

Invariants:
    - Plain passwords are never logged or stored
    - verify_password returns False on any malformed hash instead of raising
"""

import asyncio

import bcrypt

# bcrypt rejects longer input; the limit counts UTF-8 bytes, not characters
PASSWORD_MAX_BYTES = 72


async def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = await asyncio.to_thread(bcrypt.hashpw, password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


async def verify_password(password: str, password_hash: str) -> bool:
    try:
        return await asyncio.to_thread(
            bcrypt.checkpw,
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        return False
