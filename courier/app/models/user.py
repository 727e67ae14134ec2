"""
User database model.

Users are keyed by the email claim of the external identity provider.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from courier.app.db.session import Base
from courier.app.models.enums import UserRole, enum_values
from courier.app.models.timestamps import utcnow


class User(Base):
    """
    User model for role resolution.

    Created on first sign-in. The role is changed only by rider activation
    or by an admin grant/revoke.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        default=UserRole.USER,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_login = Column(DateTime(timezone=True), default=utcnow, nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
