# server/logging_setup.py

import logging
import sys
from pathlib import Path


# Top-level modules of this service; everything else is third-party.
_APP_LOGGERS = ("main", "api.", "core.", "database", "config")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - our own loggers pass through
    - uvicorn access/error lines pass through
    - other third-party loggers (sqlalchemy, passlib, multipart) only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith(_APP_LOGGERS) or name.startswith("uvicorn"):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.WARNING


def setup_logging(
    *,
    log_dir: str | Path = "data/logs",
    console_level: int | str = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with a filtered console handler and a full file handler.

    Call this once, before the first request is served.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)

    # SQL echo is far too chatty for the file log.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
