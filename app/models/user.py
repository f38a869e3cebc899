"""User model."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import deferred

from app.database import Base


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """Application user.

    ``password`` only ever holds a bcrypt hash once flushed (see
    ``app.repositories.users``). It is deferred with raiseload so that a query
    has to ask for it explicitly.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    full_name = Column(String(50), nullable=False)
    password = deferred(Column(String(256), nullable=False), raiseload=True)
    role = Column(Enum(Role, native_enum=False, length=16), nullable=False, default=Role.USER)
    avatar_public_id = Column(String(256), nullable=True)
    avatar_secure_url = Column(String(1024), nullable=True)
    forgot_password_digest = Column(String(64), nullable=True, index=True)
    forgot_password_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
