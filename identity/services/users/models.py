"""SQLAlchemy models for the user store."""

import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from pytz import UTC
from sqlalchemy import Column, DateTime, Integer, String

db: SQLAlchemy = SQLAlchemy()


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, as stored in the database."""
    return datetime.now(tz=UTC).replace(tzinfo=None)


class DBUser(db.Model):
    """Persistence for :class:`pictureit.domain.User`."""

    __tablename__ = 'users'

    user_id = Column(String(32), primary_key=True, default=_new_id)
    username = Column(String(256), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    """Salted password hash; never the password itself."""

    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    permission_level = Column(Integer, nullable=False, default=1)

    created = Column(DateTime, default=utcnow)
    updated = Column(DateTime, default=utcnow, onupdate=utcnow)
