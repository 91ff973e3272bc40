from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tunecircle.db.models import MemberListMixin, utc_now
from tunecircle.exceptions import AlreadyPresentError, NotFoundError


def touch(resource: MemberListMixin) -> None:
    if hasattr(resource, "updated_at"):
        resource.updated_at = utc_now()


async def add_member(
    db_session: AsyncSession,
    resource: MemberListMixin,
    kind: str,
    value: str,
    already_present_message: str,
) -> None:
    """
    Append a value to one of the list fields of a user or a playlist.

    The entry table's unique constraint rejects a concurrent duplicate insert that slipped past
    the membership check; it is reported the same way.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to persist the change.
        resource (MemberListMixin): The user or playlist holding the list.
        kind (str): The list to change, e.g. "songs" or "genres".
        value (str): The member to add.
        already_present_message (str): The error message when the member is already there.

    Raises:
        AlreadyPresentError: If the value is already in the list.
    """
    if value in resource.members(kind):
        raise AlreadyPresentError(already_present_message)
    resource.add_member(kind, value)
    touch(resource)
    try:
        await db_session.commit()
    except IntegrityError as exc:
        await db_session.rollback()
        raise AlreadyPresentError(already_present_message) from exc


async def remove_member(
    db_session: AsyncSession,
    resource: MemberListMixin,
    kind: str,
    value: str,
    not_found_message: str,
) -> None:
    """
    Remove a value from one of the list fields of a user or a playlist.

    Args:
        db_session (AsyncSession): The SQLAlchemy async session used to persist the change.
        resource (MemberListMixin): The user or playlist holding the list.
        kind (str): The list to change.
        value (str): The member to remove.
        not_found_message (str): The error message when the member is absent.

    Raises:
        NotFoundError: If the value is not in the list.
    """
    entry = resource.find_entry(kind, value)
    if entry is None:
        raise NotFoundError(not_found_message)
    resource.entries.remove(entry)
    touch(resource)
    await db_session.commit()
