from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio.session import AsyncSession

from tunecircle.db.database import async_get_db
from tunecircle.db.schemas import TokenSchema, UserLogin
from tunecircle.services.user_auth_service import handle_user_login

router = APIRouter(tags=["auth"], prefix="/auth")


@router.post("/login", response_model=TokenSchema)
async def login_user(
    credentials: UserLogin, db_session: AsyncSession = Depends(async_get_db)
) -> TokenSchema:
    """
    Log in the user by checking the username and password and issuing an access token.

    Args:
        credentials (UserLogin): The username and password.
        db_session (AsyncSession): The SQLAlchemy session used to interact with the database.

    Returns:
        TokenSchema: The bearer token and the id of the user.
    """
    return await handle_user_login(credentials, db_session)
