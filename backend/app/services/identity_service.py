# backend/app/services/identity_service.py
#   Thin wrapper over the Cognito user pool (sign-up, sign-in, attributes, sign-out).
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from ..AWS_configuration import AWSConfig

# Cognito attribute name -> profile field
PROFILE_ATTRIBUTES = {
    "name": "name",
    "email": "email",
    "custom:age": "age",
    "custom:height": "height",
    "custom:weight": "weight",
    "custom:fitness_goal": "fitness_goal",
    "custom:activity_level": "activity_level",
    "custom:membership_type": "membership_type",
}
EDITABLE_FIELDS = ("name", "age", "height", "weight", "fitness_goal", "activity_level")

# provider error code -> (api error code, http status)
_CLIENT_ERRORS = {
    "UsernameExistsException": ("INVALID_ARGUMENT", 400),
    "InvalidPasswordException": ("INVALID_ARGUMENT", 400),
    "InvalidParameterException": ("INVALID_ARGUMENT", 400),
    "CodeMismatchException": ("INVALID_ARGUMENT", 400),
    "ExpiredCodeException": ("INVALID_ARGUMENT", 400),
    "NotAuthorizedException": ("UNAUTHENTICATED", 401),
    "UserNotFoundException": ("UNAUTHENTICATED", 401),
    "UserNotConfirmedException": ("UNAUTHENTICATED", 401),
}


class IdentityServiceError(Exception):
    """
    Raised when a Cognito call fails.

    Typical causes:
      - Wrong credentials or unconfirmed account (401)
      - Invalid sign-up data or confirmation code (400)
      - Pool not configured, throttling or network failures (502)
    """

    def __init__(self, message: str, code: str = "UPSTREAM_UNAVAILABLE", status: int = 502, provider_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.provider_code = provider_code


def _get_cognito_client():
    """
    Resolve the Cognito client.

    Priority:
      1) current_app.config["COGNITO_CLIENT"] if provided by app factory
      2) the shared boto3 client from AWSConfig
    """
    client = current_app.config.get("COGNITO_CLIENT")
    if client:
        return client
    return AWSConfig.get_cognito_client()


def _pool_id() -> str:
    pool_id = current_app.config.get("COGNITO_USER_POOL_ID")
    if not pool_id:
        raise IdentityServiceError("Cognito user pool is not configured")
    return pool_id


def _client_id() -> str:
    client_id = current_app.config.get("COGNITO_CLIENT_ID")
    if not client_id:
        raise IdentityServiceError("Cognito app client is not configured")
    return client_id


def _call(operation: str, **params) -> Dict[str, Any]:
    try:
        method = getattr(_get_cognito_client(), operation)
        return method(**params)
    except ClientError as exc:
        provider_code = exc.response.get("Error", {}).get("Code", "Unknown")
        message = exc.response.get("Error", {}).get("Message", str(exc))
        code, status = _CLIENT_ERRORS.get(provider_code, ("UPSTREAM_UNAVAILABLE", 502))
        current_app.logger.warning({
            "component": "Identity",
            "event": "cognito_call_failed",
            "operation": operation,
            "provider_code": provider_code,
        })
        raise IdentityServiceError(message, code=code, status=status, provider_code=provider_code) from exc
    except BotoCoreError as exc:
        current_app.logger.error({
            "component": "Identity",
            "event": "cognito_unreachable",
            "operation": operation,
            "error": str(exc),
        })
        raise IdentityServiceError("Identity provider is unreachable") from exc


def attributes_to_dict(attributes) -> Dict[str, str]:
    """[{"Name": ..., "Value": ...}] -> {name: value}"""
    return {item["Name"]: item.get("Value", "") for item in attributes or []}


def sign_up(email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
    attributes = [{"Name": "email", "Value": email}]
    if name:
        attributes.append({"Name": "name", "Value": name})
    resp = _call(
        "sign_up",
        ClientId=_client_id(),
        Username=email,
        Password=password,
        UserAttributes=attributes,
    )
    return {
        "username": email,
        "user_sub": resp.get("UserSub"),
        "confirmed": bool(resp.get("UserConfirmed")),
    }


def confirm_sign_up(email: str, code: str) -> None:
    _call("confirm_sign_up", ClientId=_client_id(), Username=email, ConfirmationCode=code)


def sign_in(email: str, password: str) -> Dict[str, Any]:
    """
    USER_PASSWORD_AUTH sign-in.

    Returns:
      {"username": <pool username>, "attributes": {attribute: value}}
    """
    resp = _call(
        "initiate_auth",
        ClientId=_client_id(),
        AuthFlow="USER_PASSWORD_AUTH",
        AuthParameters={"USERNAME": email, "PASSWORD": password},
    )
    if resp.get("ChallengeName"):
        raise IdentityServiceError(
            f"Additional sign-in step required: {resp['ChallengeName']}",
            code="UNAUTHENTICATED",
            status=401,
            provider_code=resp["ChallengeName"],
        )
    access_token = (resp.get("AuthenticationResult") or {}).get("AccessToken")
    if not access_token:
        raise IdentityServiceError("Identity provider returned no access token")

    user = _call("get_user", AccessToken=access_token)
    return {
        "username": user.get("Username", email),
        "attributes": attributes_to_dict(user.get("UserAttributes")),
    }


def fetch_user_attributes(username: str) -> Dict[str, str]:
    resp = _call("admin_get_user", UserPoolId=_pool_id(), Username=username)
    return attributes_to_dict(resp.get("UserAttributes"))


def update_user_attributes(username: str, fields: Dict[str, Any]) -> None:
    """Write editable profile fields back as Cognito attributes."""
    by_field = {field: attribute for attribute, field in PROFILE_ATTRIBUTES.items()}
    attributes = [
        {"Name": by_field[field], "Value": "" if value is None else str(value)}
        for field, value in fields.items()
        if field in EDITABLE_FIELDS
    ]
    if not attributes:
        return
    _call(
        "admin_update_user_attributes",
        UserPoolId=_pool_id(),
        Username=username,
        UserAttributes=attributes,
    )


def global_sign_out(username: str) -> None:
    _call("admin_user_global_sign_out", UserPoolId=_pool_id(), Username=username)
