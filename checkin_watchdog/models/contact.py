"""Emergency contact model."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class EmergencyContact(Base):
    """Emergency contact notified when its subject goes overdue.

    Contacts are notified in ascending ``priority``; contacts sharing a
    priority keep insertion order.
    """

    __tablename__ = "emergency_contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)

    name: Mapped[str] = mapped_column(String(255))
    phone_number: Mapped[str] = mapped_column(String(50))
    priority: Mapped[int] = mapped_column(Integer, default=1, index=True)

    def __repr__(self) -> str:
        return f"<EmergencyContact(id={self.id}, user_id={self.user_id}, priority={self.priority})>"
