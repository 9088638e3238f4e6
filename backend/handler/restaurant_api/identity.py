"""User registration and sign-in against a Cognito user pool."""

import logging
from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from .errors import AuthError, ConflictError, InternalError, ValidationError
from .validation import is_valid_email, is_valid_password, require_fields, require_strings

logger = logging.getLogger(__name__)

SIGNUP_FIELDS = ("firstName", "lastName", "email", "password")
SIGNIN_FIELDS = ("email", "password")


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "Unknown")


class CognitoIdentity:
    def __init__(self, client, user_pool_id: str, client_id: str):
        self.client = client
        self.user_pool_id = user_pool_id
        self.client_id = client_id

    def sign_up(self, data: Dict[str, Any]) -> Dict[str, Any]:
        require_fields(data, SIGNUP_FIELDS)
        require_strings(data, SIGNUP_FIELDS)
        email = data["email"].strip()
        if not is_valid_email(email):
            raise ValidationError("invalid email", field="email")
        if not is_valid_password(data["password"]):
            raise ValidationError("password does not meet policy", field="password")

        try:
            self.client.admin_create_user(
                UserPoolId=self.user_pool_id,
                Username=email,
                UserAttributes=[
                    {"Name": "email", "Value": email},
                    {"Name": "email_verified", "Value": "true"},
                    {"Name": "given_name", "Value": data["firstName"]},
                    {"Name": "family_name", "Value": data["lastName"]},
                ],
                MessageAction="SUPPRESS",
            )
            self.client.admin_set_user_password(
                UserPoolId=self.user_pool_id,
                Username=email,
                Password=data["password"],
                Permanent=True,
            )
        except ClientError as e:
            code = _error_code(e)
            if code == "UsernameExistsException":
                raise ConflictError("user already exists") from e
            if code in ("InvalidPasswordException", "InvalidParameterException"):
                raise ValidationError(e.response.get("Error", {}).get("Message", "invalid sign-up data")) from e
            logger.error("Cognito sign-up failed: %s", code)
            raise InternalError("Could not create user") from e
        except BotoCoreError as e:
            logger.error("Cognito sign-up failed: %r", e)
            raise InternalError("Could not create user") from e

        logger.info("User created: %s", email)
        return {"message": "User created successfully"}

    def sign_in(self, data: Dict[str, Any]) -> Dict[str, Any]:
        require_fields(data, SIGNIN_FIELDS)
        require_strings(data, SIGNIN_FIELDS)
        email = data["email"].strip()
        try:
            result = self.client.admin_initiate_auth(
                UserPoolId=self.user_pool_id,
                ClientId=self.client_id,
                AuthFlow="ADMIN_USER_PASSWORD_AUTH",
                AuthParameters={"USERNAME": email, "PASSWORD": data["password"]},
            )
        except ClientError as e:
            code = _error_code(e)
            if code in ("NotAuthorizedException", "UserNotFoundException"):
                raise AuthError("invalid email or password", status_code=400) from e
            logger.error("Cognito sign-in failed: %s", code)
            raise InternalError("Could not sign in") from e
        except BotoCoreError as e:
            logger.error("Cognito sign-in failed: %r", e)
            raise InternalError("Could not sign in") from e

        tokens = result.get("AuthenticationResult") or {}
        if "IdToken" not in tokens:
            # A challenge (e.g. NEW_PASSWORD_REQUIRED) instead of tokens
            raise AuthError(f"sign-in requires {result.get('ChallengeName', 'a challenge')}", status_code=400)
        return {"idToken": tokens["IdToken"], "accessToken": tokens.get("AccessToken")}
