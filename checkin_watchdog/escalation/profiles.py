"""Subject profile lookup."""

from typing import Optional

from sqlalchemy import select

from checkin_watchdog.config import settings
from checkin_watchdog.escalation.contacts import SessionFactory
from checkin_watchdog.models.database import get_db_session
from checkin_watchdog.models.profile import Profile


class ProfileDirectory:
    """Read-only access to subject display identities."""

    def __init__(
        self,
        session_factory: SessionFactory = get_db_session,
        default_name: Optional[str] = None
    ):
        self.session_factory = session_factory
        self.default_name = default_name or settings.DEFAULT_SUBJECT_NAME

    async def get_profile(self, subject_id: str) -> Optional[Profile]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Profile).where(Profile.id == subject_id)
            )
            return result.scalar_one_or_none()

    def resolve_display_name(self, profile: Optional[Profile]) -> str:
        """Name to put in alerts: full name, then email, then a placeholder."""
        if profile is None:
            return self.default_name
        return profile.full_name or profile.email or self.default_name
