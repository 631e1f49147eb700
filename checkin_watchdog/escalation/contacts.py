"""Emergency contact lookup for escalations."""

from typing import AsyncContextManager, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_watchdog.models.contact import EmergencyContact
from checkin_watchdog.models.database import get_db_session
from checkin_watchdog.utils.logging import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class ContactDirectory:
    """Read-only access to each subject's emergency contacts."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    async def get_contacts_ordered_by_priority(self, subject_id: str) -> List[EmergencyContact]:
        """Get a subject's contacts, lowest priority number first."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(EmergencyContact)
                .where(EmergencyContact.user_id == subject_id)
                .order_by(EmergencyContact.priority, EmergencyContact.id)
            )
            contacts = list(result.scalars().all())

        logger.debug("Retrieved emergency contacts",
                     subject_id=subject_id,
                     contact_count=len(contacts))
        return contacts
