import pytest
from starlette.websockets import WebSocketDisconnect

from familyhub.modules.auth.deps import UserContext
from familyhub.modules.auth.service import CreateAccessToken
from familyhub.modules.core import router as core_router


def _Auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _RegisterSmiths(client) -> dict:
    response = client.post(
        "/api/auth/register",
        json={"familyName": "Smiths", "pin": "1234", "parentName": "Alice"},
    )
    assert response.status_code == 201
    return response.json()


def _AddChild(client, parent_token: str, name: str = "Bob") -> dict:
    response = client.post(
        "/api/auth/register-member",
        json={"name": name, "role": "child"},
        headers=_Auth(parent_token),
    )
    assert response.status_code == 201
    return response.json()


def _Login(client, family_code: str, user_id: int) -> str:
    response = client.post(
        "/api/auth/login",
        json={"familyCode": family_code, "pin": "1234", "userId": user_id},
    )
    assert response.status_code == 200
    return response.json()["token"]


def test_chore_approval_end_to_end(client):
    registered = _RegisterSmiths(client)
    parent_token = registered["token"]
    family_code = registered["family"]["familyCode"]
    assert registered["user"]["role"] == "parent"
    assert registered["user"]["jars"] == {"spend": 0.0, "save": 0.0, "give": 0.0}

    bob = _AddChild(client, parent_token)
    bob_token = _Login(client, family_code, bob["id"])

    created = client.post(
        "/api/chores",
        json={
            "title": "Dishes",
            "points": 10,
            "schedule": {"frequency": "daily"},
            "assignees": [bob["id"]],
        },
        headers=_Auth(parent_token),
    )
    assert created.status_code == 201
    chore = created.json()
    assert chore["schedule"] == {"frequency": "daily"}
    assert [item["userId"] for item in chore["assignments"]] == [bob["id"]]

    completed = client.post(f"/api/chores/{chore['id']}/complete", json={}, headers=_Auth(bob_token))
    assert completed.status_code == 201
    completion_id = completed.json()["id"]

    denied = client.post(
        f"/api/chores/{chore['id']}/approve",
        json={"completionId": completion_id, "approved": True},
        headers=_Auth(bob_token),
    )
    assert denied.status_code == 403

    approved = client.post(
        f"/api/chores/{chore['id']}/approve",
        json={"completionId": completion_id, "approved": True},
        headers=_Auth(parent_token),
    )
    assert approved.status_code == 200
    assert approved.json() == {"success": True, "status": "approved"}

    again = client.post(
        f"/api/chores/{chore['id']}/approve",
        json={"completionId": completion_id, "approved": True},
        headers=_Auth(parent_token),
    )
    assert again.status_code == 409

    me = client.get("/api/auth/me", headers=_Auth(bob_token)).json()
    assert me["user"]["points"] == 10
    assert me["user"]["streak"] == 1

    detail = client.get(f"/api/chores/{chore['id']}", headers=_Auth(bob_token)).json()
    assert detail["assignments"][0]["status"] == "approved"
    assert detail["assignments"][0]["completions"][0]["status"] == "approved"


def test_login_without_member_returns_picker(client):
    registered = _RegisterSmiths(client)
    _AddChild(client, registered["token"])

    response = client.post(
        "/api/auth/login",
        json={"familyCode": registered["family"]["familyCode"].lower(), "pin": "1234"},
    )

    assert response.status_code == 200
    body = response.json()
    assert "token" not in body
    assert [member["name"] for member in body["family"]["members"]] == ["Alice", "Bob"]


def test_login_with_wrong_pin(client):
    registered = _RegisterSmiths(client)
    response = client.post(
        "/api/auth/login",
        json={"familyCode": registered["family"]["familyCode"], "pin": "0000"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_refresh_issues_access_token(client):
    registered = _RegisterSmiths(client)
    response = client.post("/api/auth/refresh", json={"refreshToken": registered["refreshToken"]})
    assert response.status_code == 200

    me = client.get("/api/auth/me", headers=_Auth(response.json()["token"]))
    assert me.status_code == 200
    assert me.json()["user"]["name"] == "Alice"


def test_refresh_token_rejected_on_protected_route(client):
    registered = _RegisterSmiths(client)
    response = client.get("/api/auth/me", headers=_Auth(registered["refreshToken"]))
    assert response.status_code == 403


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/chores")
    assert response.status_code == 401
    assert "error" in response.json()


def test_missing_body_field_is_bad_request(client):
    response = client.post("/api/auth/register", json={"familyName": "Smiths", "parentName": "Alice"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: pin"}


def test_allowance_distribution_over_api(client):
    registered = _RegisterSmiths(client)
    parent_token = registered["token"]
    bob = _AddChild(client, parent_token)
    bob_token = _Login(client, registered["family"]["familyCode"], bob["id"])
    payload = {
        "amount": 100,
        "distribution": {"spend": 50, "save": 30, "give": 20},
        "userIds": [bob["id"]],
    }

    denied = client.post("/api/allowance/distribute", json=payload, headers=_Auth(bob_token))
    assert denied.status_code == 403

    response = client.post("/api/allowance/distribute", json=payload, headers=_Auth(parent_token))
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["transactions"][0]["jarDistribution"] == {"spend": 50.0, "save": 30.0, "give": 20.0}

    me = client.get("/api/auth/me", headers=_Auth(bob_token)).json()
    assert me["user"]["jars"] == {"spend": 50.0, "save": 30.0, "give": 20.0}

    history = client.get("/api/allowance", headers=_Auth(bob_token)).json()
    assert [txn["amount"] for txn in history] == [100.0]

    bad = dict(payload, distribution={"spend": 50, "save": 30, "give": 10})
    rejected = client.post("/api/allowance/distribute", json=bad, headers=_Auth(parent_token))
    assert rejected.status_code == 400


def test_reward_redemption_over_api(client):
    registered = _RegisterSmiths(client)
    parent_token = registered["token"]
    bob = _AddChild(client, parent_token)
    bob_token = _Login(client, registered["family"]["familyCode"], bob["id"])

    forbidden = client.post(
        "/api/rewards",
        json={"title": "Ice cream", "pointCost": 5},
        headers=_Auth(bob_token),
    )
    assert forbidden.status_code == 403

    created = client.post(
        "/api/rewards",
        json={"title": "Ice cream", "pointCost": 5, "stock": 1},
        headers=_Auth(parent_token),
    )
    assert created.status_code == 201
    reward_id = created.json()["id"]

    poor = client.post(f"/api/rewards/{reward_id}/redeem", headers=_Auth(bob_token))
    assert poor.status_code == 400
    assert poor.json() == {"error": "Insufficient points"}

    listing = client.get("/api/rewards", headers=_Auth(bob_token)).json()
    assert listing[0]["stock"] == 1


def test_redeem_unknown_reward_is_bad_request(client):
    registered = _RegisterSmiths(client)
    response = client.post("/api/rewards/9999/redeem", headers=_Auth(registered["token"]))
    assert response.status_code == 400
    assert response.json() == {"error": "Reward not found"}


def test_me_with_family_only_token_lists_members(client, settings):
    registered = _RegisterSmiths(client)
    _AddChild(client, registered["token"])
    family_token = CreateAccessToken(UserContext(FamilyId=registered["family"]["id"]), settings)

    response = client.get("/api/auth/me", headers=_Auth(family_token))

    assert response.status_code == 200
    body = response.json()
    assert "user" not in body
    assert [member["name"] for member in body["family"]["members"]] == ["Alice", "Bob"]

    chores = client.get("/api/chores", headers=_Auth(family_token))
    assert chores.status_code == 403


def test_chat_message_pushed_to_family_socket(client):
    registered = _RegisterSmiths(client)
    token = registered["token"]

    with client.websocket_connect(f"/ws?token={token}") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        posted = client.post("/api/chat", json={"content": "Dinner at six"}, headers=_Auth(token))
        assert posted.status_code == 201

        event = websocket.receive_json()
        assert event["event"] == "message"
        assert event["data"]["content"] == "Dinner at six"
        assert event["data"]["user"]["name"] == "Alice"

    history = client.get("/api/chat", headers=_Auth(token)).json()
    assert [message["content"] for message in history] == ["Dinner at six"]


def test_socket_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws?token=not-a-token") as websocket:
            websocket.receive_text()
    assert exc_info.value.code == 1008


def test_health_endpoints(client, engine, monkeypatch):
    assert client.get("/api/health").json() == {"success": True, "message": "ok"}

    monkeypatch.setattr(core_router, "GetEngine", lambda: engine)
    assert client.get("/api/health/db").json() == {"status": "ok"}

    def _broken_engine():
        raise RuntimeError("no database")

    monkeypatch.setattr(core_router, "GetEngine", _broken_engine)
    assert client.get("/api/health/db").json() == {
        "status": "error",
        "detail": "database unavailable",
    }


def test_unknown_route_is_json_not_found(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "API not found"}
