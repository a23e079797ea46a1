# server/core/context.py

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from config import Settings
from core.artifacts import ArtifactSink, build_sink
from core.notifier import Notifier, build_notifier
from database import Database


@dataclass
class ServiceContext:
    """
    Everything a request handler needs besides its DB session.
    Created by the app factory and kept on `app.state.ctx`.
    """
    settings: Settings
    database: Database
    sink: ArtifactSink
    notifier: Notifier
    clock: Callable[[], datetime] = field(default=datetime.now)

    def today(self) -> date:
        return self.clock().date()


def build_context(settings: Settings, **overrides) -> ServiceContext:
    parts = {
        "database": Database(settings.database_url),
        "sink": build_sink(settings),
        "notifier": build_notifier(settings),
    }
    parts.update(overrides)
    return ServiceContext(settings=settings, **parts)
