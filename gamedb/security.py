from __future__ import annotations

from typing import Callable

import bcrypt


PasswordHasher = Callable[[str, int], str]


def hash_password(plaintext: str, rounds: int) -> str:
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds)).decode("ascii")


def verify_password(plaintext: str, hashed: str) -> bool:
    return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("ascii"))
