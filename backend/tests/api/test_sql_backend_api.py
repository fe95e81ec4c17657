"""The same API flow on the SQL store backend."""

from __future__ import annotations

HEADER = "x-session-token"
BASE = "/api/v1/session"


def test_walkthrough_on_sql_backend(sql_app, host_token, user_token):
    host = sql_app.test_client()
    user = sql_app.test_client()
    body = {"userToken": user_token, "apiUrl": "https://a", "webUiUrl": "https://w"}

    sid = host.post(f"{BASE}/new", json=body, headers={HEADER: host_token}).get_json()["sessionUid"]
    uid = user.post(f"{BASE}/{sid}/login", headers={HEADER: user_token}).get_json()["uid"]
    user.post(f"{BASE}/{sid}/user/{uid}/react/1/heart", headers={HEADER: user_token})
    host.post(f"{BASE}/{sid}/state/2/voting", headers={HEADER: host_token})

    state = user.get(f"{BASE}/{sid}/state", headers={HEADER: user_token}).get_json()
    listed = host.get(f"{BASE}/{sid}/reactions?page=1", headers={HEADER: host_token}).get_json()
    health = host.get("/api/v1/health").get_json()

    assert (state["page"], state["state"]) == ("2", "voting")
    assert [r["reaction"] for r in listed["data"]] == ["heart"]
    assert health["store"] == "sql"
    assert health["store_status"] == "ok"
