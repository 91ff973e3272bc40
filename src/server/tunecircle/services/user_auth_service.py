import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tunecircle.db.database import async_get_db
from tunecircle.db.models import User
from tunecircle.db.schemas import TokenSchema, UserLogin
from tunecircle.exceptions import (
    ExpiredCredentialError,
    InternalError,
    InvalidCredentialError,
    MissingCredentialError,
    UnauthorizedError,
    UserNotFoundError,
)
from tunecircle.services.utils import config, is_valid_object_id

logger = logging.getLogger(__name__)

BEARER_SCHEME = HTTPBearer(auto_error=False)
PWD_CONTEXT = CryptContext(schemes=["argon2"], deprecated="auto")


def create_token(data: dict, secret_key: str, expires_delta: timedelta) -> str:
    """
    Generates a JSON Web Token (JWT).

    Args:
        data (dict): The payload data to include in the token.
        secret_key (str): The secret key used to sign the token.
        expires_delta (timedelta): The duration until the token expires.

    Returns:
        str: The encoded JWT as a string.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=config["ALGORITHM"])


def create_access_token(user_id: str) -> str:
    """
    Creates an access token bound to a user, with the configured lifetime.

    Args:
        user_id (str): The identity to embed in the 'sub' claim.

    Returns:
        str: The encoded access token.
    """
    return create_token(
        {"sub": user_id},
        config["SECRET_KEY"],
        timedelta(minutes=int(config["ACCESS_TOKEN_EXPIRE_MINUTES"])),
    )


def hash_password(password: str) -> str:
    return PWD_CONTEXT.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return PWD_CONTEXT.verify(plain_password, hashed_password)


async def get_user_by_username(db_session: AsyncSession, username: str) -> User | None:
    result = await db_session.execute(select(User).filter_by(username=username))
    return result.scalar_one_or_none()


async def get_user_by_id(db_session: AsyncSession, user_id: str) -> User | None:
    result = await db_session.execute(select(User).filter_by(id=user_id))
    return result.scalar_one_or_none()


async def handle_user_login(credentials: UserLogin, db_session: AsyncSession) -> TokenSchema:
    """
    Check a username and password pair and issue an access token.

    Args:
        credentials (UserLogin): The submitted username and password.
        db_session (AsyncSession): The SQLAlchemy session used to interact with the database.

    Returns:
        TokenSchema: The access token and the id of the authenticated user.

    Raises:
        UnauthorizedError: If the username is unknown or the password does not match.
    """
    user = None
    if credentials.username:
        user = await get_user_by_username(db_session, credentials.username)
    if user is None:
        raise UnauthorizedError("Invalid Username")
    if not credentials.password or not verify_password(credentials.password, user.hashed_password):
        raise UnauthorizedError("Invalid Password")
    return TokenSchema(token=create_access_token(user.id), user_id=user.id)


def decode_jwt_token(token: str, secret_key: str, algorithm: str) -> str | None:
    """
    Decode a JWT token and extract the user id from the 'sub' claim.

    Args:
        token (str): The JWT token to decode.
        secret_key (str): The secret key used to verify the token signature.
        algorithm (str): The algorithm used for decoding the token.

    Returns:
        str | None: The 'sub' claim, if any.

    Raises:
        ExpiredCredentialError: The token has expired.
        InvalidCredentialError: The token signature or format is invalid.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except ExpiredSignatureError as exc:
        raise ExpiredCredentialError() from exc
    except JWTError as exc:
        raise InvalidCredentialError() from exc
    return payload.get("sub")


async def verify_credential(token: str | None, db_session: AsyncSession) -> User:
    """
    Resolve a bearer credential to the user it was issued for.

    Args:
        token (str | None): The bearer token taken from the Authorization header.
        db_session (AsyncSession): The SQLAlchemy session used to query the user.

    Returns:
        User: The user bound to the token.

    Raises:
        MissingCredentialError: No token was sent.
        ExpiredCredentialError: The token has expired.
        InvalidCredentialError: The token could not be verified.
        InternalError: The token does not carry a well formed user id.
        UserNotFoundError: The user no longer exists.
    """
    if not token:
        raise MissingCredentialError()
    user_id = decode_jwt_token(token, config["SECRET_KEY"], config["ALGORITHM"])
    if not is_valid_object_id(user_id):
        logger.error("Verified token carries a malformed user id: %r", user_id)
        raise InternalError()
    user = await get_user_by_id(db_session, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(BEARER_SCHEME)],
    db_session: Annotated[AsyncSession, Depends(async_get_db)],
) -> User:
    """
    Retrieve the current user based on the bearer token and attach it to the request state.

    Args:
        request (Request): The incoming request.
        credentials (HTTPAuthorizationCredentials | None): The bearer credential from the
            Authorization header, None when absent.
        db_session (AsyncSession): The database session for querying the user.

    Returns:
        User: The user object retrieved from the database.
    """
    jwt_token = credentials.credentials if credentials else None
    user = await verify_credential(jwt_token, db_session)
    request.state.user_id = user.id
    request.state.user = user
    return user
