# server/core/task_store.py

from sqlalchemy.orm import Session

from models.task import Task, TaskStatus
from models.user import User


def get_task(db: Session, task_id: int) -> Task | None:
    return db.get(Task, task_id)


def get_task_with_creator(db: Session, task_id: int) -> tuple[Task, User | None] | None:
    """
    Loads a task together with its creator's user row.
    The creator is a plain username column, so the user may not resolve.
    """
    row = (
        db.query(Task, User)
        .outerjoin(User, Task.creator == User.username)
        .filter(Task.id == task_id)
        .first()
    )
    if row is None:
        return None
    return row[0], row[1]


def pending_created_by(db: Session, username: str) -> list[Task]:
    return (
        db.query(Task)
        .filter(Task.creator == username, Task.status == TaskStatus.PENDING.value)
        .order_by(Task.id)
        .all()
    )


def pending_assigned_to(db: Session, username: str) -> list[Task]:
    return (
        db.query(Task)
        .filter(Task.assignee == username, Task.status == TaskStatus.PENDING.value)
        .order_by(Task.id)
        .all()
    )
