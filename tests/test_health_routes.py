from conftest import BrokenRedis


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"db": True, "redis": True, "s3_configured": True}


def test_healthz_redis_down(app, client):
    app.config["REDIS_CLIENT"] = BrokenRedis()
    r = client.get("/healthz")
    assert r.status_code == 503
    assert r.get_json()["redis"] is False


def test_healthz_bucket_missing(app, client):
    app.config["S3_BUCKET_NAME"] = ""
    r = client.get("/healthz")
    assert r.status_code == 503
    assert r.get_json()["s3_configured"] is False
