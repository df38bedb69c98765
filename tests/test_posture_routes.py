import io


def test_presigned_upload_scoped_to_identity(client, auth_header):
    r = client.get("/posture/presigned-upload?file_extension=JPG", headers=auth_header)
    assert r.status_code == 200
    body = r.get_json()
    assert body["object_key"].startswith("posture-photos/user-1/")
    assert body["object_key"].endswith(".jpg")
    assert "method=put_object" in body["presigned_url"]


def test_presigned_upload_profile_category(client, auth_header):
    r = client.get("/posture/presigned-upload?file_extension=png&category=profile", headers=auth_header)
    assert r.status_code == 200
    assert r.get_json()["object_key"].startswith("profile-photos/user-1/")


def test_presigned_upload_rejects_bad_extension(client, auth_header):
    r = client.get("/posture/presigned-upload?file_extension=exe", headers=auth_header)
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["field"] == "file_extension"


def test_presigned_upload_storage_failure(client, auth_header, s3):
    s3.fail = True
    r = client.get("/posture/presigned-upload?file_extension=jpg", headers=auth_header)
    assert r.status_code == 502
    assert r.get_json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"


def test_upload_photo(client, auth_header, s3, image_file):
    r = client.post(
        "/posture/photos",
        data={"file": image_file},
        headers=auth_header,
        content_type="multipart/form-data",
    )
    assert r.status_code == 201
    key = r.get_json()["object_key"]
    assert key.startswith("posture-photos/user-1/")
    assert s3.objects[key]["content_type"] == "image/png"
    assert s3.objects[key]["body"].startswith(b"\x89PNG")


def test_upload_rejects_non_image(client, auth_header):
    r = client.post(
        "/posture/photos",
        data={"file": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
        headers=auth_header,
        content_type="multipart/form-data",
    )
    assert r.status_code == 400
    assert r.get_json()["error"]["details"]["field"] == "file"


def test_upload_requires_file(client, auth_header):
    r = client.post("/posture/photos", data={}, headers=auth_header, content_type="multipart/form-data")
    assert r.status_code == 400


def test_upload_too_large(app, client, auth_header, image_file):
    app.config["MAX_UPLOAD_MB"] = 0
    r = client.post(
        "/posture/photos",
        data={"file": image_file},
        headers=auth_header,
        content_type="multipart/form-data",
    )
    assert r.status_code == 413
    assert r.get_json()["error"]["code"] == "REQUEST_TOO_LARGE"


def test_list_only_own_photos(client, auth_header, s3):
    s3.objects["posture-photos/user-1/a.jpg"] = {"body": b"a", "content_type": "image/jpeg", "modified": None}
    s3.objects["posture-photos/user-2/b.jpg"] = {"body": b"b", "content_type": "image/jpeg", "modified": None}

    r = client.get("/posture/photos", headers=auth_header)
    assert r.status_code == 200
    keys = [photo["key"] for photo in r.get_json()["photos"]]
    assert keys == ["posture-photos/user-1/a.jpg"]


def test_download_url_for_own_key(client, auth_header):
    r = client.get("/posture/photos/url?key=posture-photos/user-1/a.jpg", headers=auth_header)
    assert r.status_code == 200
    assert "method=get_object" in r.get_json()["url"]


def test_download_url_for_foreign_key_forbidden(client, auth_header):
    r = client.get("/posture/photos/url?key=posture-photos/user-2/b.jpg", headers=auth_header)
    assert r.status_code == 403
    assert r.get_json()["error"]["code"] == "FORBIDDEN"

    r = client.get("/posture/photos/url?key=posture-photos/user-1/../user-2/b.jpg", headers=auth_header)
    assert r.status_code == 403


def test_download_url_requires_key(client, auth_header):
    r = client.get("/posture/photos/url", headers=auth_header)
    assert r.status_code == 400


def test_storage_scope_required(client, header_for):
    r = client.get("/posture/photos", headers=header_for(scopes=["storage:write"]))
    assert r.status_code == 403
