import io
import os
import sys
from datetime import datetime

import pytest
from botocore.exceptions import ClientError
from flask_jwt_extended import create_access_token

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
sys.path.append(os.path.abspath("."))

from backend.app import create_app  # noqa: E402

ALL_SCOPES = ["assessments:run", "profile:read", "profile:write", "storage:read", "storage:write"]


class DummyRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value

    def ping(self):
        return True


class BrokenRedis:
    def get(self, key):
        raise ConnectionError("redis down")

    def set(self, key, value, ex=None):
        raise ConnectionError("redis down")

    def ping(self):
        raise ConnectionError("redis down")


def _client_error(code, message, operation):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeCognito:
    """In-memory stand-in for the cognito-idp client."""

    def __init__(self):
        self.users = {
            "user-1": {
                "email": "sam@example.com",
                "password": "Secret123!",
                "attributes": {"email": "sam@example.com", "name": "Sam", "custom:age": "30", "custom:height": "170", "custom:weight": "70"},
            }
        }
        self.fail_with = None
        self.calls = []

    def _maybe_fail(self, operation):
        self.calls.append(operation)
        if self.fail_with:
            raise _client_error(self.fail_with, "provider failure", operation)

    def _find_by_email(self, email):
        for username, user in self.users.items():
            if user["email"] == email:
                return username, user
        return None, None

    def sign_up(self, ClientId, Username, Password, UserAttributes):
        self._maybe_fail("SignUp")
        if self._find_by_email(Username)[0]:
            raise _client_error("UsernameExistsException", "User already exists", "SignUp")
        attributes = {a["Name"]: a["Value"] for a in UserAttributes}
        self.users[f"user-{len(self.users) + 1}"] = {"email": Username, "password": Password, "attributes": attributes}
        return {"UserSub": f"user-{len(self.users)}", "UserConfirmed": False}

    def confirm_sign_up(self, ClientId, Username, ConfirmationCode):
        self._maybe_fail("ConfirmSignUp")
        if ConfirmationCode != "123456":
            raise _client_error("CodeMismatchException", "Invalid verification code provided", "ConfirmSignUp")
        return {}

    def initiate_auth(self, ClientId, AuthFlow, AuthParameters):
        self._maybe_fail("InitiateAuth")
        username, user = self._find_by_email(AuthParameters["USERNAME"])
        if not user or user["password"] != AuthParameters["PASSWORD"]:
            raise _client_error("NotAuthorizedException", "Incorrect username or password.", "InitiateAuth")
        return {"AuthenticationResult": {"AccessToken": f"access-{username}"}}

    def get_user(self, AccessToken):
        username = AccessToken.replace("access-", "", 1)
        user = self.users[username]
        return {
            "Username": username,
            "UserAttributes": [{"Name": k, "Value": v} for k, v in user["attributes"].items()],
        }

    def admin_get_user(self, UserPoolId, Username):
        self._maybe_fail("AdminGetUser")
        user = self.users.get(Username)
        if not user:
            raise _client_error("UserNotFoundException", "User does not exist.", "AdminGetUser")
        return {
            "Username": Username,
            "UserAttributes": [{"Name": k, "Value": v} for k, v in user["attributes"].items()],
        }

    def admin_update_user_attributes(self, UserPoolId, Username, UserAttributes):
        self._maybe_fail("AdminUpdateUserAttributes")
        for item in UserAttributes:
            self.users[Username]["attributes"][item["Name"]] = item["Value"]
        return {}

    def admin_user_global_sign_out(self, UserPoolId, Username):
        self._maybe_fail("AdminUserGlobalSignOut")
        return {}


class FakeS3:
    """In-memory stand-in for the s3 client."""

    def __init__(self):
        self.objects = {}
        self.fail = False

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600):
        if self.fail:
            raise _client_error("AccessDenied", "Access Denied", "GeneratePresignedUrl")
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Signature=test&method={ClientMethod}"

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        if self.fail:
            raise _client_error("AccessDenied", "Access Denied", "PutObject")
        self.objects[Key] = {
            "body": Fileobj.read(),
            "content_type": (ExtraArgs or {}).get("ContentType"),
            "modified": datetime(2026, 1, 1, 12, len(self.objects) % 60),
        }

    def list_objects_v2(self, Bucket, Prefix, ContinuationToken=None):
        contents = [
            {"Key": key, "Size": len(obj["body"]), "LastModified": obj["modified"]}
            for key, obj in sorted(self.objects.items())
            if key.startswith(Prefix)
        ]
        return {"Contents": contents, "IsTruncated": False}


@pytest.fixture
def redis_client():
    return DummyRedis()


@pytest.fixture
def cognito():
    return FakeCognito()


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def app(redis_client, cognito, s3, monkeypatch):
    # cache fallback is process-local; start every test from an empty one
    monkeypatch.setattr("backend.app.services.cache_service._LOCAL_CACHE", {})
    app = create_app({
        "TESTING": True,
        "JWT_SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "REDIS_CLIENT": redis_client,
        "S3_CLIENT": s3,
        "COGNITO_CLIENT": cognito,
        "S3_BUCKET_NAME": "bitfit-test",
        "COGNITO_USER_POOL_ID": "us-east-1_test",
        "COGNITO_CLIENT_ID": "client-test",
        "DEFAULT_SCOPES": list(ALL_SCOPES),
        "GUIDE_DOWNLOAD_URLS": {"weightLoss": "", "muscleBuild": "", "stressRelief": "", "exercisesAnywhere": ""},
        "GUIDE_FALLBACK_TO_TEXT_FILE": True,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def make_auth_header(app, identity="user-1", scopes=None):
    with app.app_context():
        token = create_access_token(
            identity=identity,
            additional_claims={"scopes": list(ALL_SCOPES if scopes is None else scopes)},
        )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header(app):
    return make_auth_header(app)


@pytest.fixture
def image_file():
    return (io.BytesIO(b"\x89PNG\r\n\x1a\nfake-image"), "posture.png", "image/png")


@pytest.fixture
def header_for(app):
    def _build(identity="user-1", scopes=None):
        return make_auth_header(app, identity=identity, scopes=scopes)
    return _build
