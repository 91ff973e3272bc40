from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from tunecircle.services.utils import config

SQLALCHEMY_DATABASE_URL = config["SQLALCHEMY_DATABASE_URL"]

async_engine = create_async_engine(SQLALCHEMY_DATABASE_URL, echo=False, future=True)

local_session = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def create_tables() -> None:
    """
    Create every table declared on the metadata if it does not exist yet.
    """
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def async_get_db():
    async_session = local_session()
    async with async_session as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise
        finally:
            await db.close()
