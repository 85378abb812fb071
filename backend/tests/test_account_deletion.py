from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import AccountDeletionError, NotFoundError
from app.models.session_token import SessionToken
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate
from app.services import accounts as accounts_service
from app.services.accounts import delete_account
from app.services.tasks import create_task, get_task


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_delete_me_cascades(api, db_session, users, login_token):
    user_a, user_b = users
    a_id, b_id = user_a.id, user_b.id
    token_a = login_token(user_a)
    login_token(user_a)
    token_b = login_token(user_b)

    a_tasks = [
        api.post("/tasks", json={"description": f"a{i}"}, headers=_auth(token_a)).json()["id"]
        for i in range(3)
    ]
    b_task = api.post("/tasks", json={"description": "b"}, headers=_auth(token_b)).json()["id"]

    res = api.delete("/auth/me", headers=_auth(token_a))
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == a_id
    assert body["email"] == "test@example.com"
    assert "password_hash" not in body and "password" not in body

    assert db_session.query(User).filter(User.id == a_id).count() == 0
    assert db_session.query(Task).filter(Task.owner_id == a_id).count() == 0
    assert db_session.query(SessionToken).filter(SessionToken.user_id == a_id).count() == 0

    # The old token is dead and the tasks are gone for every caller.
    assert api.get("/auth/me", headers=_auth(token_a)).status_code == 401
    for task_id in a_tasks:
        assert api.get(f"/tasks/{task_id}", headers=_auth(token_b)).status_code == 404
        with pytest.raises(NotFoundError):
            get_task(db_session, a_id, task_id)

    # Other user untouched.
    assert api.get(f"/tasks/{b_task}", headers=_auth(token_b)).status_code == 200
    assert db_session.query(SessionToken).filter(SessionToken.user_id == b_id).count() == 1


def test_delete_account_is_resumable(db_session, users):
    user_a, _ = users
    a_id = user_a.id
    create_task(db_session, a_id, TaskCreate(description="left behind"))

    # Simulate an interrupted earlier run that only removed the user row.
    db_session.query(User).filter(User.id == a_id).delete(synchronize_session=False)
    db_session.commit()
    assert db_session.query(Task).filter(Task.owner_id == a_id).count() == 1

    ghost = User(id=a_id, name="Test User", email="test@example.com", password_hash="x")
    delete_account(db_session, ghost)

    assert db_session.query(Task).filter(Task.owner_id == a_id).count() == 0


def test_delete_account_rolls_back_on_failure(db_session, users, monkeypatch):
    user_a, _ = users
    a_id = user_a.id
    create_task(db_session, a_id, TaskCreate(description="keep me"))

    def boom(db, user_id):
        raise OperationalError("DELETE FROM session_tokens", {}, Exception("disk I/O error"))

    monkeypatch.setattr(accounts_service, "drop_all_sessions", boom)

    with pytest.raises(AccountDeletionError):
        delete_account(db_session, user_a)

    # Nothing partial: user and tasks are both still there.
    assert db_session.query(User).filter(User.id == a_id).count() == 1
    assert db_session.query(Task).filter(Task.owner_id == a_id).count() == 1


def test_delete_me_failure_is_opaque_500(client, monkeypatch):
    def boom(db, user_id):
        raise OperationalError("DELETE FROM session_tokens", {}, Exception("secret internals"))

    monkeypatch.setattr(accounts_service, "drop_all_sessions", boom)

    res = client.delete("/auth/me")
    assert res.status_code == 500
    assert res.json() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}
