from datetime import timedelta

import pytest
from fastapi import status
from jose import jwt
from tunecircle.db.schemas import UserLogin
from tunecircle.exceptions import (
    ExpiredCredentialError,
    InternalError,
    InvalidCredentialError,
    MissingCredentialError,
    UnauthorizedError,
    UserNotFoundError,
)
from tunecircle.services.user_auth_service import (
    create_access_token,
    create_token,
    decode_jwt_token,
    handle_user_login,
    verify_credential,
)

from ..fixtures.constants import (
    ENV_CONFIG_EXAMPLE,
    MISSING_ID_EXAMPLE,
    PASSWORD_EXAMPLE,
    USER_ID_EXAMPLE,
)
from ..fixtures.services.user_auth_service_fixtures import mock_config_env
from ..utils.utils import add_test_user


def test_create_access_token_carries_user_id():
    token = create_access_token(USER_ID_EXAMPLE)
    payload = jwt.decode(
        token, ENV_CONFIG_EXAMPLE["SECRET_KEY"], algorithms=[ENV_CONFIG_EXAMPLE["ALGORITHM"]]
    )
    assert payload["sub"] == USER_ID_EXAMPLE
    assert "exp" in payload


def test_decode_expired_token():
    token = create_token(
        {"sub": USER_ID_EXAMPLE}, ENV_CONFIG_EXAMPLE["SECRET_KEY"], timedelta(minutes=-1)
    )
    with pytest.raises(ExpiredCredentialError) as exc:
        decode_jwt_token(token, ENV_CONFIG_EXAMPLE["SECRET_KEY"], ENV_CONFIG_EXAMPLE["ALGORITHM"])
    assert exc.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert exc.value.message == "Token has expired"


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        create_token({"sub": USER_ID_EXAMPLE}, "another-secret", timedelta(minutes=5)),
    ],
)
def test_decode_invalid_token(token):
    with pytest.raises(InvalidCredentialError) as exc:
        decode_jwt_token(token, ENV_CONFIG_EXAMPLE["SECRET_KEY"], ENV_CONFIG_EXAMPLE["ALGORITHM"])
    assert exc.value.message == "Invalid Token"


async def test_verify_credential_success(db_session):
    await add_test_user(db_session)
    user = await verify_credential(create_access_token(USER_ID_EXAMPLE), db_session)
    assert user.id == USER_ID_EXAMPLE


@pytest.mark.parametrize("token", [None, ""])
async def test_verify_credential_missing(db_session, token):
    with pytest.raises(MissingCredentialError) as exc:
        await verify_credential(token, db_session)
    assert exc.value.message == "No Token inserted"


async def test_verify_credential_malformed_user_id(db_session):
    with pytest.raises(InternalError) as exc:
        await verify_credential(create_access_token("user@example.com"), db_session)
    assert exc.value.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert exc.value.message == "It's not you, it's us"


async def test_verify_credential_deleted_user(db_session):
    with pytest.raises(UserNotFoundError) as exc:
        await verify_credential(create_access_token(MISSING_ID_EXAMPLE), db_session)
    assert exc.value.status_code == status.HTTP_404_NOT_FOUND


async def test_handle_user_login(db_session):
    await add_test_user(db_session)
    token = await handle_user_login(
        UserLogin(username="ada.l", password=PASSWORD_EXAMPLE), db_session
    )
    assert token.user_id == USER_ID_EXAMPLE
    assert (await verify_credential(token.token, db_session)).id == USER_ID_EXAMPLE


@pytest.mark.parametrize(
    "credentials, expected_message",
    [
        ({"username": "nobody", "password": PASSWORD_EXAMPLE}, "Invalid Username"),
        ({"password": PASSWORD_EXAMPLE}, "Invalid Username"),
        ({"username": "ada.l", "password": "Wr0ng!Pass"}, "Invalid Password"),
        ({"username": "ada.l"}, "Invalid Password"),
    ],
)
async def test_handle_user_login_failure(db_session, credentials, expected_message):
    await add_test_user(db_session)
    with pytest.raises(UnauthorizedError) as exc:
        await handle_user_login(UserLogin(**credentials), db_session)
    assert exc.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert exc.value.message == expected_message
