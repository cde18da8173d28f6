"""SQLAlchemy models for image records."""

import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from pytz import UTC
from sqlalchemy import Column, DateTime, LargeBinary, String, Text

db: SQLAlchemy = SQLAlchemy()


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, as stored in the database."""
    return datetime.now(tz=UTC).replace(tzinfo=None)


class DBImage(db.Model):
    """Persistence for :class:`images.domain.Image`."""

    __tablename__ = 'images'

    image_id = Column(String(32), primary_key=True, default=_new_id)
    owner_id = Column(String(32), nullable=False, index=True)
    url = Column(String(2048), nullable=False)
    content_type = Column(String(32), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    data = Column(LargeBinary, nullable=True)

    created = Column(DateTime, default=utcnow)
    updated = Column(DateTime, default=utcnow)
