from datetime import datetime, timedelta, timezone


def _create(client, **fields):
    payload = {"description": "Write report"}
    payload.update(fields)
    res = client.post("/tasks", json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def test_create_task_defaults(client, users):
    user_a, _ = users
    task = _create(client)
    assert task["description"] == "Write report"
    assert task["completed"] is False
    assert task["priority"] == "medium"
    assert task["dueDate"] is None
    assert task["owner"] == user_a.id
    assert task["id"]
    assert task["createdAt"] and task["updatedAt"]


def test_create_task_all_fields(client):
    task = _create(
        client,
        description="  Ship it  ",
        completed=True,
        priority="high",
        dueDate="2030-01-01T10:00:00Z",
    )
    assert task["description"] == "Ship it"
    assert task["completed"] is True
    assert task["priority"] == "high"
    assert task["dueDate"].startswith("2030-01-01T10:00:00")


def test_create_task_ignores_client_owner(client, users):
    user_a, user_b = users
    task = _create(client, owner=user_b.id)
    assert task["owner"] == user_a.id


def test_create_task_validation(client):
    for payload in (
        {"description": ""},
        {"description": "   "},
        {"description": "x", "priority": "urgent"},
        {"completed": True},
    ):
        res = client.post("/tasks", json=payload)
        assert res.status_code == 400, payload
        assert res.json()["error"] == "VALIDATION_ERROR"


def test_get_task(client):
    task = _create(client)
    res = client.get(f"/tasks/{task['id']}")
    assert res.status_code == 200
    assert res.json() == task


def test_update_task_allowed_fields(client):
    task = _create(client)
    res = client.patch(
        f"/tasks/{task['id']}",
        json={"description": "Rewrite report", "completed": True, "priority": "low", "dueDate": "2031-05-01T00:00:00Z"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["description"] == "Rewrite report"
    assert body["completed"] is True
    assert body["priority"] == "low"
    assert body["dueDate"].startswith("2031-05-01")
    assert body["owner"] == task["owner"]

    # Clearing the due date is allowed.
    res2 = client.patch(f"/tasks/{task['id']}", json={"dueDate": None})
    assert res2.status_code == 200
    assert res2.json()["dueDate"] is None


def test_update_task_rejects_disallowed_fields(client, users):
    _, user_b = users
    task = _create(client)
    for payload in ({"owner": user_b.id}, {"id": "x"}, {"createdAt": "2020-01-01T00:00:00Z"}, {"completed": True, "foo": 1}):
        res = client.patch(f"/tasks/{task['id']}", json=payload)
        assert res.status_code == 400, payload
        assert res.json()["error"] == "VALIDATION_ERROR"

    unchanged = client.get(f"/tasks/{task['id']}").json()
    assert unchanged == task


def test_update_task_rejects_bad_values(client):
    task = _create(client)
    for payload in ({"priority": "urgent"}, {"description": ""}, {"completed": None}, {"priority": None}):
        res = client.patch(f"/tasks/{task['id']}", json=payload)
        assert res.status_code == 400, payload
        assert res.json()["error"] == "VALIDATION_ERROR"


def test_delete_task(client):
    task = _create(client)
    res = client.delete(f"/tasks/{task['id']}")
    assert res.status_code == 200
    assert res.json()["id"] == task["id"]

    assert client.get(f"/tasks/{task['id']}").status_code == 404
    assert client.delete(f"/tasks/{task['id']}").status_code == 404


def test_list_tasks_filter_paginate_sort(client):
    _create(client, description="b", completed=True)
    _create(client, description="a")
    _create(client, description="c", completed=True)

    all_tasks = client.get("/tasks").json()
    assert [t["description"] for t in all_tasks] == ["b", "a", "c"]

    done = client.get("/tasks", params={"completed": "true"}).json()
    assert sorted(t["description"] for t in done) == ["b", "c"]

    open_ = client.get("/tasks", params={"completed": "false"}).json()
    assert [t["description"] for t in open_] == ["a"]

    asc = client.get("/tasks", params={"sortBy": "description:asc"}).json()
    assert [t["description"] for t in asc] == ["a", "b", "c"]

    desc = client.get("/tasks", params={"sortBy": "description:desc"}).json()
    assert [t["description"] for t in desc] == ["c", "b", "a"]

    page = client.get("/tasks", params={"sortBy": "description:asc", "limit": "1", "skip": "1"}).json()
    assert [t["description"] for t in page] == ["b"]

    unlimited = client.get("/tasks", params={"limit": "0"}).json()
    assert len(unlimited) == 3


def test_list_tasks_lenient_query_values(client):
    _create(client, description="a")
    _create(client, description="b")

    res = client.get("/tasks", params={"limit": "abc", "skip": "-3", "sortBy": "nonsense:desc"})
    assert res.status_code == 200
    assert [t["description"] for t in res.json()] == ["a", "b"]


def test_unknown_task_id_is_404(client):
    for method in ("get", "patch", "delete"):
        kwargs = {"json": {"completed": True}} if method == "patch" else {}
        res = getattr(client, method)("/tasks/does-not-exist", **kwargs)
        assert res.status_code == 404
        assert res.json() == {"error": "NOT_FOUND", "message": "Task not found"}


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_due_date_offset_is_preserved_as_utc(client):
    task = _create(client, dueDate="2030-01-01T10:00:00+05:00")
    expected = datetime(2030, 1, 1, 5, 0, tzinfo=timezone.utc)
    assert _parse_ts(task["dueDate"]) == expected

    fetched = client.get(f"/tasks/{task['id']}").json()
    assert _parse_ts(fetched["dueDate"]) == expected

    res = client.patch(f"/tasks/{task['id']}", json={"dueDate": "2031-06-30T20:30:00-04:00"})
    assert res.status_code == 200
    assert _parse_ts(res.json()["dueDate"]) == datetime(2031, 7, 1, 0, 30, tzinfo=timezone.utc)


def test_timestamps_carry_utc_offset(client):
    task = _create(client)
    for key in ("createdAt", "updatedAt"):
        assert _parse_ts(task[key]).utcoffset() == timedelta(0)

    me = client.get("/auth/me").json()
    assert _parse_ts(me["createdAt"]).utcoffset() == timedelta(0)
