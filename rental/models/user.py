# rental/models/user.py
"""
User model for the rental platform.

Users are owned by the identity subsystem; the booking core only reads
them to address notifications and to compose booking details.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from ..core.enums import RoleName
from ..database import Base
from .types import TimestampMixin


class User(TimestampMixin, Base):
    """Host or seeker account."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('HOST', 'SEEKER')", name="ck_users_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.SEEKER.value)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} role={self.role}>"
