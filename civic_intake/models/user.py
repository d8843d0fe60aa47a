import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Enum
from sqlalchemy.sql import func
from civic_intake.core.database import Base
from civic_intake.core.policy import Role


class User(Base):
    """
    User model representing citizens, officers and admins.

    Stores authentication credentials and profile information.
    Passwords are stored as bcrypt hashes (never plaintext).
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Email is unique and indexed for fast lookups during login
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    # Stored as plain VARCHAR so the schema does not depend on a native enum type
    role = Column(
        Enum(Role, name="user_role", native_enum=False, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.CITIZEN,
    )
    is_verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
