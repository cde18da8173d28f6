from contextlib import contextmanager
from typing import Generator

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pictureit import logging

from .models import db

logger = logging.getLogger(__name__)


class DatastoreError(IOError):
    """The record store could not complete an operation."""


def init_app(app: Flask) -> None:
    """Attach the database to ``app``."""
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


@contextmanager
def transaction(commit: bool = True) -> Generator[Session, None, None]:
    """Provide a session that is committed on exit, or rolled back."""
    try:
        yield db.session
        if commit:
            db.session.commit()
    except SQLAlchemyError as e:
        logger.error('Database error: %s', e)
        db.session.rollback()
        raise DatastoreError('Database error: %s' % e) from e
