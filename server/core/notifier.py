# server/core/notifier.py

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, Protocol


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    to: str
    subject: str
    body: str


class Notifier(Protocol):
    def send(self, notice: Notice) -> None: ...


class SmtpNotifier:
    def __init__(self, host: str, port: int, user: str = "", password: str = "", sender: str = ""):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user

    def send(self, notice: Notice) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = notice.to
        msg["Subject"] = notice.subject
        msg.set_content(notice.body)

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)


class LogNotifier:
    """Used when no mail transport is configured."""

    def send(self, notice: Notice) -> None:
        logger.info("Mail to %s: %s", notice.to, notice.subject)


def build_notifier(settings) -> Notifier:
    if settings.mail_backend == "smtp":
        return SmtpNotifier(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user,
            settings.smtp_password,
            settings.sender,
        )
    if settings.mail_backend == "log":
        return LogNotifier()
    raise ValueError(f"Unknown mail backend: {settings.mail_backend}")


def dispatch(notifier: Notifier, notices: Iterable[Notice]) -> None:
    """
    Deliver notices after the state change they describe has been committed.
    Delivery problems are logged, never raised.
    """
    for notice in notices:
        try:
            notifier.send(notice)
        except Exception:
            logger.exception("Failed to send %r to %s", notice.subject, notice.to)


# -------------------------------
# Message templates
# -------------------------------

_SIGNATURE = """
Thanks for using Task Validator! Start validating your tasks and stay on track with Task Validator.

Regards,
Task Validator Team
"""


def approval_notice(email: str, creator: str, title: str, approver: str, score: int) -> Notice:
    body = (
        f"Hello {creator},\n\n"
        f'Your task titled "{title}" has been approved by {approver}.\n'
        f"Your score is now {score}.\n"
        f"{_SIGNATURE}"
    )
    return Notice(to=email, subject="Task Approved Notification", body=body)


def rejection_notice(email: str, creator: str, title: str, approver: str, score: int) -> Notice:
    body = (
        f"Hello {creator},\n\n"
        f'Your task titled "{title}" has been rejected by {approver}.\n'
        f"Your score is now {score}. Please submit new proof for validation.\n"
        f"{_SIGNATURE}"
    )
    return Notice(to=email, subject="Task Rejected Notification", body=body)


def proof_notice(email: str, assignee: str, title: str, creator: str) -> Notice:
    body = (
        f"Hello {assignee},\n\n"
        f'{creator} has submitted proof for the task "{title}".\n'
        f"It is waiting for your validation.\n"
        f"{_SIGNATURE}"
    )
    return Notice(to=email, subject="Proof Submitted Notification", body=body)
