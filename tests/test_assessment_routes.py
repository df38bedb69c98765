BODY_PAYLOAD = {
    "age": 30, "gender": "male", "height": 170, "weight": 70, "waist": 85, "hip": 100,
    "systolic": 118, "diastolic": 76, "resting_heart_rate": 64,
}


def test_body_assessment_ok(client, auth_header):
    r = client.post("/bitfit/assessments/body", json=BODY_PAYLOAD, headers=auth_header)
    assert r.status_code == 200
    body = r.get_json()
    assert body["kind"] == "body"
    assert body["result"]["bmi"]["value"] == 24.2
    assert body["result"]["overall_score"] == 94
    assert [step["stage"] for step in body["trace"]][-1] == "engine_total"
    assert body["latency_ms"] >= 0
    assert "test" not in body


def test_cardio_assessment_with_test_segment(client, auth_header):
    r = client.post(
        "/bitfit/assessments/cardio/cooper",
        json={"age": 25, "gender": "male", "distance": 1.62},
        headers=auth_header,
    )
    assert r.status_code == 200
    body = r.get_json()
    assert body["test"] == "cooper"
    assert body["result"]["category"] == "Good"


def test_invalid_input_returns_field(client, auth_header):
    r = client.post("/bitfit/assessments/body", json=dict(BODY_PAYLOAD, height=0), headers=auth_header)
    assert r.status_code == 400
    error = r.get_json()["error"]
    assert error["code"] == "INVALID_ARGUMENT"
    assert error["details"]["field"] == "height"


def test_non_object_body_rejected(client, auth_header):
    r = client.post("/bitfit/assessments/body", json=[1, 2, 3], headers=auth_header)
    assert r.status_code == 400


def test_unknown_kind_and_test(client, auth_header):
    r = client.post("/bitfit/assessments/yoga", json={}, headers=auth_header)
    assert r.status_code == 404
    assert r.get_json()["error"]["code"] == "NOT_FOUND"

    r = client.post("/bitfit/assessments/cardio/swim", json={"age": 30, "gender": "male"}, headers=auth_header)
    assert r.status_code == 404
    assert r.get_json()["error"]["details"]["field"] == "test"


def test_requires_token(client):
    r = client.post("/bitfit/assessments/body", json=BODY_PAYLOAD)
    assert r.status_code == 401
    assert r.get_json()["error"]["code"] == "UNAUTHENTICATED"


def test_requires_scope(client, header_for):
    r = client.post("/bitfit/assessments/body", json=BODY_PAYLOAD, headers=header_for(scopes=["profile:read"]))
    assert r.status_code == 403
    assert r.get_json()["error"]["code"] == "FORBIDDEN"


def test_oversized_body_rejected(client, auth_header):
    payload = dict(BODY_PAYLOAD, notes="x" * (600 * 1024))
    r = client.post("/bitfit/assessments/body", json=payload, headers=auth_header)
    assert r.status_code == 413
    assert r.get_json()["error"]["code"] == "REQUEST_TOO_LARGE"


def test_report_download(client, auth_header):
    r = client.post("/bitfit/assessments/body/report", json=BODY_PAYLOAD, headers=auth_header)
    assert r.status_code == 200
    assert r.mimetype == "text/plain"
    assert r.headers["Content-Disposition"].startswith('attachment; filename="Body-Assessment-Report-')
    assert r.get_data(as_text=True).startswith("BODY COMPOSITION ASSESSMENT REPORT - BitFit Pro")


def test_strength_report_with_test_segment(client, auth_header):
    r = client.post(
        "/bitfit/assessments/strength/push_up/report",
        json={"age": 35, "gender": "female", "push_ups": 22},
        headers=auth_header,
    )
    assert r.status_code == 200
    assert "Push-Up-Endurance-Assessment" in r.headers["Content-Disposition"]
    assert "Percentile: 70th-89th" in r.get_data(as_text=True)


def test_catalogue(client):
    r = client.get("/bitfit/assessments")
    assert r.status_code == 200
    catalogue = {entry["kind"]: entry for entry in r.get_json()["assessments"]}
    assert set(catalogue) == {"body", "body_fat", "cardio", "strength", "calories"}
    assert "rockport" in [t["test"] for t in catalogue["cardio"]["tests"]]
    assert "tests" not in catalogue["body"]


def test_request_id_echoed(client, auth_header):
    headers = dict(auth_header, **{"X-Request-ID": "req-abc"})
    r = client.post("/bitfit/assessments/body", json=BODY_PAYLOAD, headers=headers)
    assert r.headers["X-Request-ID"] == "req-abc"
    assert r.get_json()["request_id"] == "req-abc"
