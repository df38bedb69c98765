import json

from conftest import BrokenRedis


def test_get_profile_from_identity_provider(client, auth_header):
    r = client.get("/profile", headers=auth_header)
    assert r.status_code == 200
    body = r.get_json()
    assert body["source"] == "identity_provider"
    assert body["profile"]["name"] == "Sam"
    assert body["profile"]["membership_type"] == "FREE"
    assert body["bmi"]["value"] == 24.2


def test_get_profile_falls_back_to_cache(client, auth_header, cognito, redis_client):
    redis_client.store["profile:user-1"] = json.dumps({"name": "Sam", "height": "180", "weight": "81"})
    cognito.fail_with = "InternalErrorException"

    r = client.get("/profile", headers=auth_header)
    assert r.status_code == 200
    body = r.get_json()
    assert body["source"] == "cache"
    assert body["profile"]["height"] == "180"
    assert body["bmi"]["value"] == 25.0


def test_get_profile_defaults_without_cache(client, auth_header, cognito):
    cognito.fail_with = "InternalErrorException"
    body = client.get("/profile", headers=auth_header).get_json()
    assert body["source"] == "defaults"
    assert body["profile"]["membership_type"] == "FREE"
    assert body["bmi"] is None


def test_update_profile_syncs_to_identity_provider(client, auth_header, cognito, redis_client):
    r = client.put(
        "/profile",
        json={"age": 31, "weight": 72.5, "activity_level": "Moderate", "fitness_goal": "run a 10k"},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.get_json()
    assert body["synced"] is True
    assert body["profile"]["weight"] == "72.5"
    assert body["profile"]["activity_level"] == "moderate"
    assert cognito.users["user-1"]["attributes"]["custom:weight"] == "72.5"
    assert json.loads(redis_client.store["profile:user-1"])["age"] == "31"


def test_update_profile_returns_same_shape_as_read(client, auth_header):
    r = client.put("/profile", json={"name": "Sam"}, headers=auth_header)
    assert r.status_code == 200
    saved = r.get_json()["profile"]
    assert saved["membership_type"] == "FREE"
    assert "email" in saved

    read = client.get("/profile", headers=auth_header).get_json()["profile"]
    assert set(saved) == set(read)


def test_update_profile_rejects_membership_change(client, auth_header):
    r = client.put("/profile", json={"membership_type": "PREMIUM"}, headers=auth_header)
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["field"] == "membership_type"


def test_update_profile_rejects_bad_values(client, auth_header):
    r = client.put("/profile", json={"height": 20}, headers=auth_header)
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["field"] == "height"

    r = client.put("/profile", json={"nickname": "sammy"}, headers=auth_header)
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["field"] == "nickname"


def test_update_profile_keeps_cache_when_sync_fails(client, auth_header, cognito, redis_client):
    cognito.fail_with = "InternalErrorException"
    r = client.put("/profile", json={"name": "Samantha"}, headers=auth_header)
    assert r.status_code == 200
    assert r.get_json()["synced"] is False
    assert json.loads(redis_client.store["profile:user-1"])["name"] == "Samantha"


def test_update_profile_uses_local_cache_when_redis_down(app, client, auth_header, cognito):
    app.config["REDIS_CLIENT"] = BrokenRedis()
    cognito.fail_with = "InternalErrorException"

    r = client.put("/profile", json={"height": 180, "weight": 81}, headers=auth_header)
    assert r.status_code == 200

    body = client.get("/profile", headers=auth_header).get_json()
    assert body["source"] == "cache"
    assert body["profile"]["height"] == "180"


def test_profile_requires_scope(client, header_for):
    r = client.put("/profile", json={"name": "Sam"}, headers=header_for(scopes=["profile:read"]))
    assert r.status_code == 403
