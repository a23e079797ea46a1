# server/database.py

import logging
from contextlib import contextmanager
from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.errors import StoreFailure
from models import Base


logger = logging.getLogger(__name__)


class Database:
    """
    Owns the engine and session factory for one application instance.
    The same code runs against a SQLite file or a networked Postgres,
    depending only on the URL.
    """

    def __init__(self, url: str):
        self.url = make_url(url)
        connect_args = {}
        if self.url.get_backend_name() == "sqlite":
            connect_args["check_same_thread"] = False

        self.engine = create_engine(url, connect_args=connect_args)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def init_db(self):
        if self.url.get_backend_name() == "sqlite" and self.url.database not in (None, "", ":memory:"):
            Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database ready: %s", self.url.render_as_string(hide_password=True))

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.ctx.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Commit everything done inside the block, or roll all of it back.
    Store errors leave as StoreFailure; domain errors pass through untouched.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store failure, transaction rolled back")
        raise StoreFailure() from e
    except Exception:
        db.rollback()
        raise
