"""End-to-end tests of the session API through the Flask test client."""

from __future__ import annotations

import json

import pytest

from revint.services.authorization.dto import Role

HEADER = "x-session-token"
BASE = "/api/v1/session"


def _open(client, host_token, user_token, **extra):
    body = {"userToken": user_token, "apiUrl": "https://a", "webUiUrl": "https://w", **extra}
    return client.post(f"{BASE}/new", json=body, headers={HEADER: host_token})


def _login(app, host_token, user_token):
    """Open a session with one client and log in with another.

    Returns ``(host_client, user_client, opened_payload, user_uid)``.
    """
    host = app.test_client()
    user = app.test_client()
    opened = _open(host, host_token, user_token).get_json()
    uid = user.post(f"{BASE}/{opened['sessionUid']}/login", headers={HEADER: user_token}).get_json()["uid"]
    return host, user, opened, uid


def test_documented_walkthrough(app, sign):
    """Open, discover, log in, react, drive and read a session."""
    host_token = sign(name="Demo", date="2025-01-01")
    user_token = sign(name="Audience", date="2025-01-01")
    host = app.test_client()
    user = app.test_client()

    opened = _open(host, host_token, user_token)
    assert opened.status_code == 201
    payload = opened.get_json()
    assert payload["token"] == host_token
    assert set(payload) == {"token", "hostUid", "sessionUid"}
    sid = payload["sessionUid"]

    info = user.get(f"{BASE}/{sid}")
    assert info.get_json() == {"userToken": user_token, "apiUrl": "https://a", "webUiUrl": "https://w"}

    login = user.post(f"{BASE}/{sid}/login", headers={HEADER: user_token})
    uid = login.get_json()["uid"]
    assert login.status_code == 200

    reacted = user.post(f"{BASE}/{sid}/user/{uid}/react/1/heart", headers={HEADER: user_token})
    assert reacted.get_json() == {"success": True}

    moved = host.post(f"{BASE}/{sid}/state/2/voting", headers={HEADER: host_token})
    assert moved.get_json() == {"success": True}

    state = user.get(f"{BASE}/{sid}/state", headers={HEADER: user_token}).get_json()
    assert (state["page"], state["state"]) == ("2", "voting")
    assert "token" not in state


def test_identity_cookie_attributes(client, host_token, user_token):
    response = _open(client, host_token, user_token)

    opened = response.get_json()
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith(f"uid.{opened['sessionUid']}={opened['hostUid']}")
    assert "HttpOnly" in cookie
    assert "SameSite=Lax" in cookie


def test_get_unknown_session_is_null(client):
    response = client.get(f"{BASE}/missing")

    assert response.status_code == 200
    assert response.get_json() is None


def test_ws_url_round_trips(client, host_token, user_token):
    sid = _open(client, host_token, user_token, wsUrl="wss://live").get_json()["sessionUid"]

    assert client.get(f"{BASE}/{sid}").get_json()["wsUrl"] == "wss://live"


def test_login_twice_keeps_identity(app, host_token, user_token, app_services):
    _, user, opened, uid = _login(app, host_token, user_token)

    again = user.post(f"{BASE}/{opened['sessionUid']}/login", headers={HEADER: user_token})

    assert again.get_json() == {"uid": uid}
    assert "Set-Cookie" not in again.headers
    assert len(app_services.stores.users.get(user_token)) == 1


def test_one_browser_joins_two_sessions(app, sign):
    host = app.test_client()
    browser = app.test_client()
    first_user, second_user = sign(name="First"), sign(name="Second")
    first = _open(host, sign(name="Host A", host=True), first_user).get_json()["sessionUid"]
    second = _open(host, sign(name="Host B", host=True), second_user).get_json()["sessionUid"]

    uid_a = browser.post(f"{BASE}/{first}/login", headers={HEADER: first_user}).get_json()["uid"]
    uid_b = browser.post(f"{BASE}/{second}/login", headers={HEADER: second_user}).get_json()["uid"]

    assert uid_a != uid_b
    assert browser.get(f"{BASE}/{first}/state", headers={HEADER: first_user}).status_code == 200
    assert browser.get(f"{BASE}/{second}/state", headers={HEADER: second_user}).status_code == 200
    reacted = browser.post(f"{BASE}/{second}/user/{uid_b}/react/0/clap", headers={HEADER: second_user})
    assert reacted.get_json() == {"success": True}


def test_presenter_joins_another_session_as_audience(app, sign, host_token, user_token):
    browser = app.test_client()
    own = _open(browser, host_token, user_token).get_json()["sessionUid"]
    guest_user = sign(name="Guest")
    guest = _open(app.test_client(), sign(name="Other host", host=True), guest_user).get_json()["sessionUid"]

    login = browser.post(f"{BASE}/{guest}/login", headers={HEADER: guest_user})

    assert "Set-Cookie" in login.headers
    assert browser.get(f"{BASE}/{guest}/state", headers={HEADER: guest_user}).status_code == 200
    moved = browser.post(f"{BASE}/{own}/state/1/intro", headers={HEADER: host_token})
    assert moved.get_json() == {"success": True}


def test_state_requires_login(app, host_token, user_token):
    host = app.test_client()
    sid = _open(host, host_token, user_token).get_json()["sessionUid"]
    stranger = app.test_client()

    response = stranger.get(f"{BASE}/{sid}/state", headers={HEADER: user_token})

    assert response.status_code == 403
    assert response.mimetype == "application/problem+json"
    assert response.get_json()["detail"] == "must be logged in"


def test_user_cannot_set_state(app, host_token, user_token):
    host, user, opened, _ = _login(app, host_token, user_token)
    sid = opened["sessionUid"]

    response = user.post(f"{BASE}/{sid}/state/9/hacked", headers={HEADER: user_token})

    assert response.status_code == 403
    state = host.get(f"{BASE}/{sid}/state", headers={HEADER: host_token}).get_json()
    assert (state["page"], state["state"]) == ("0", "init")
    assert state["token"] == host_token


def test_host_set_state_without_cookie(client, app, host_token, user_token):
    sid = _open(client, host_token, user_token).get_json()["sessionUid"]
    fresh = app.test_client()

    response = fresh.post(f"{BASE}/{sid}/state/1/x", headers={HEADER: host_token})

    assert response.status_code == 403
    assert response.get_json()["detail"] == "only host can set state"


@pytest.mark.parametrize(
    "headers,status,code",
    [
        ({}, 401, "unauthorized"),
        ({HEADER: "garbage"}, 401, "unauthorized"),
    ],
)
def test_credential_errors(client, headers, status, code):
    response = client.post(f"{BASE}/new", json={}, headers=headers)

    assert response.status_code == status
    assert response.get_json()["code"] == code
    assert response.get_json()["request_id"]


def test_invalid_user_token_has_its_own_code(client, host_token):
    response = _open(client, host_token, "not.valid")

    assert response.status_code == 401
    assert response.get_json()["code"] == "invalid_user_token"


def test_malformed_body(client, host_token):
    response = client.post(f"{BASE}/new", json={"apiUrl": "https://a"}, headers={HEADER: host_token})

    assert response.status_code == 422
    assert "userToken" in response.get_json()["details"]["errors"]


def test_unknown_session_is_404(client, user_token):
    response = client.post(f"{BASE}/missing/login", headers={HEADER: user_token})

    assert response.status_code == 404


def test_react_as_someone_else(app, host_token, user_token):
    _, user, opened, _ = _login(app, host_token, user_token)

    response = user.post(
        f"{BASE}/{opened['sessionUid']}/user/someone/react/1/heart", headers={HEADER: user_token}
    )

    assert response.status_code == 403
    assert response.get_json()["detail"] == "user id mismatch"


def test_duplicate_reactions_listed_by_host(app, host_token, user_token):
    host, user, opened, uid = _login(app, host_token, user_token)
    sid = opened["sessionUid"]
    for _ in range(2):
        user.post(f"{BASE}/{sid}/user/{uid}/react/0.0/thumbsup", headers={HEADER: user_token})

    listed = host.get(f"{BASE}/{sid}/reactions?page=0.0&uid={uid}", headers={HEADER: host_token})

    body = listed.get_json()
    assert body["count"] == 2
    assert [r["reaction"] for r in body["data"]] == ["thumbsup", "thumbsup"]
    assert "token" not in body["data"][0]


def test_reaction_listing_needs_page_for_uid(app, host_token, user_token):
    host, _, opened, uid = _login(app, host_token, user_token)

    response = host.get(
        f"{BASE}/{opened['sessionUid']}/reactions?uid={uid}", headers={HEADER: host_token}
    )

    assert response.status_code == 422


def test_set_state_pushes_to_registered_pipes(app, app_hub, host_token, user_token):
    host, _, opened, uid = _login(app, host_token, user_token)
    sid = opened["sessionUid"]

    class Pipe:
        def __init__(self):
            self.frames = []

        def send(self, data):
            self.frames.append(json.loads(data))

    pipe = Pipe()
    app_hub.register(sid, pipe, Role.USER, uid)

    host.post(f"{BASE}/{sid}/state/3/quiz", headers={HEADER: host_token})

    assert pipe.frames == [{"type": "state_change", "token": user_token, "page": "3", "state": "quiz"}]


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"
    assert response.get_json()["store"] == "memory"


def test_unknown_route_is_problem_json(client):
    response = client.get("/api/v1/nope")

    assert response.status_code == 404
    assert response.mimetype == "application/problem+json"


def test_missing_public_key_is_a_server_error(make_app):
    client = make_app(PUBLIC_KEY=None).test_client()

    response = client.post(f"{BASE}/new", json={}, headers={HEADER: "e30.AAAA"})

    assert response.status_code == 500
    assert response.get_json()["code"] == "configuration_error"
    assert response.get_json()["detail"] == "Service misconfigured"
