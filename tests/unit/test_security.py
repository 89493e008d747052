from __future__ import annotations

from types import SimpleNamespace

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from backend.app.core.security import hash_password, require_user, verify_password


def test_hash_and_verify_round_trip() -> None:
    hashed = hash_password("correct horse", rounds=4)
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False


def test_long_passwords_are_not_truncated() -> None:
    base = "x" * 80
    hashed = hash_password(base + "a", rounds=4)
    assert verify_password(base + "a", hashed) is True
    assert verify_password(base + "b", hashed) is False


def test_verify_rejects_malformed_hash() -> None:
    assert verify_password("anything", "not-a-bcrypt-hash") is False


class _StubStorage:
    def __init__(self) -> None:
        self.lookups: list[str] = []

    async def get_user_by_id(self, user_id: str):
        self.lookups.append(user_id)
        if user_id == "known":
            return SimpleNamespace(id="known")
        return None


def _app_with_security(storage: _StubStorage) -> FastAPI:
    app = FastAPI()
    app.state.storage_service = storage

    @app.get("/users/{user_id}")
    async def user_endpoint(user_id: str = Depends(require_user)) -> dict[str, str]:
        return {"user": user_id}

    return app


def test_require_user_known() -> None:
    storage = _StubStorage()
    with TestClient(_app_with_security(storage)) as client:
        response = client.get("/users/known")
    assert response.status_code == 200
    assert response.json() == {"user": "known"}
    assert storage.lookups == ["known"]


def test_require_user_unknown() -> None:
    with TestClient(_app_with_security(_StubStorage())) as client:
        response = client.get("/users/ghost")
    assert response.status_code == 404
    assert response.json()["detail"] == "user not found"
