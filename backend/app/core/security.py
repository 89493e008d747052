from __future__ import annotations

import hashlib

import bcrypt
from fastapi import HTTPException, Request, status

from ..services.storage import StorageService

BCRYPT_ROUNDS = 10


def _pre_hash_password(password: str) -> bytes:
    # bcrypt only reads 72 bytes, a SHA-256 digest is 32
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    hashed = bcrypt.hashpw(_pre_hash_password(password), bcrypt.gensalt(rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_pre_hash_password(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


async def require_user(request: Request, user_id: str) -> str:
    """Resolve ``user_id`` to an existing account or answer 404."""

    storage: StorageService = request.app.state.storage_service
    user = await storage.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    request.state.current_user_id = user.id
    return user.id
