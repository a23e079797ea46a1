# server/core/lifecycle.py

"""
Task lifecycle and scoring.

    Pending --approve--> Approved        (terminal, creator +10 on time / +5 late)
    Pending --reject---> Pending         (creator -3, proof may be resubmitted)

Every function takes the request's DB session and returns plain results;
notices for outbound mail are returned to the caller, who sends them after
the response so a mail failure can never undo a committed transition.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from core import task_store
from core.accounts import get_user
from core.artifacts import ArtifactSink, discard, put_with_retry
from core.errors import Forbidden, InvalidStatus, NotFound, UnknownUser
from core.notifier import Notice, approval_notice, proof_notice, rejection_notice
from database import transaction
from models.task import Task, TaskStatus
from models.user import User


logger = logging.getLogger(__name__)

ON_TIME_REWARD = 10
LATE_REWARD = 5
REJECTION_PENALTY = 3

DECISIONS = (TaskStatus.APPROVED.value, TaskStatus.REJECTED.value)


def _require_task(db: Session, task_id: int) -> Task:
    task = task_store.get_task(db, task_id)
    if task is None:
        raise NotFound("Task not found.")
    return task


def _require_user(db: Session, username: str):
    if get_user(db, username) is None:
        raise UnknownUser(f"User '{username}' does not exist.")


def score_delta(decision: str, due_date: date, today: date) -> int:
    if decision == TaskStatus.REJECTED.value:
        return -REJECTION_PENALTY
    # the due date itself still counts as on time
    return ON_TIME_REWARD if today <= due_date else LATE_REWARD


# -------------------------------
# Creation and editing
# -------------------------------

def create_task(
    db: Session,
    creator: str,
    title: str,
    description: str,
    due_date: date,
    assignee: str,
) -> Task:
    _require_user(db, assignee)

    task = Task(
        title=title,
        description=description,
        due_date=due_date,
        creator=creator,
        assignee=assignee,
        status=TaskStatus.PENDING.value,
        proof=None,
    )
    with transaction(db):
        db.add(task)
    db.refresh(task)

    logger.info("Task %s created by %s for %s", task.id, creator, assignee)
    return task


def update_task(
    db: Session,
    task_id: int,
    actor: str,
    title: str,
    description: str,
    due_date: date,
    assignee: str,
    enforce_ownership: bool = True,
) -> Task:
    task = _require_task(db, task_id)
    if enforce_ownership and task.creator != actor:
        raise Forbidden("Only the creator can edit this task.")
    _require_user(db, assignee)

    with transaction(db):
        task.title = title
        task.description = description
        task.due_date = due_date
        task.assignee = assignee
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: int, actor: str, enforce_ownership: bool = True):
    task = _require_task(db, task_id)
    if enforce_ownership and task.creator != actor:
        raise Forbidden("Only the creator can delete this task.")

    with transaction(db):
        db.delete(task)
    logger.info("Task %s deleted by %s", task_id, actor)


def list_created(db: Session, username: str) -> list[Task]:
    return task_store.pending_created_by(db, username)


def list_assigned(db: Session, username: str) -> list[Task]:
    return task_store.pending_assigned_to(db, username)


# -------------------------------
# Proof
# -------------------------------

def submit_proof(
    db: Session,
    sink: ArtifactSink,
    task_id: int,
    filename: str,
    data: bytes,
    acting_user: str,
    attempts: int = 3,
    backoff: float = 0.2,
) -> tuple[str, list[Notice]]:
    """
    Stores the artifact and records its reference on the task.
    Status is left alone; the assignee is told that proof is waiting.
    """
    task = _require_task(db, task_id)

    ref = put_with_retry(sink, data, filename, attempts, backoff)
    try:
        with transaction(db):
            task.proof = ref
    except Exception:
        discard(sink, ref)
        raise
    logger.info("Proof %s stored for task %s by %s", ref, task_id, acting_user)

    notices = []
    assignee = get_user(db, task.assignee)
    if assignee is not None and assignee.email:
        notices.append(proof_notice(assignee.email, assignee.username, task.title, acting_user))
    return ref, notices


def fetch_proof(db: Session, task_id: int) -> str:
    task = task_store.get_task(db, task_id)
    if task is None or not task.proof:
        raise NotFound("Proof not found.")
    return task.proof


# -------------------------------
# Validation
# -------------------------------

def validate_task(
    db: Session,
    task_id: int,
    decision,
    approver: str,
    today: date,
    enforce_ownership: bool = True,
) -> list[Notice]:
    """
    Applies an approve/reject decision and adjusts the creator's score.

    Status and score are written in one transaction. Rejection is not
    idempotent: every call deducts the penalty again.
    """
    if decision not in DECISIONS:
        raise InvalidStatus()

    found = task_store.get_task_with_creator(db, task_id)
    if found is None:
        raise NotFound("Task not found.")
    task, creator = found

    if enforce_ownership and task.assignee != approver:
        raise Forbidden("Only the assignee can validate this task.")
    if task.status == TaskStatus.APPROVED.value:
        raise InvalidStatus("Task has already been approved.")

    delta = score_delta(decision, task.due_date, today)
    new_status = TaskStatus.APPROVED if decision == TaskStatus.APPROVED.value else TaskStatus.PENDING

    with transaction(db):
        # conditional write: a concurrent approval that committed after our read leaves no row to update
        updated = (
            db.query(Task)
            .filter(Task.id == task_id, Task.status != TaskStatus.APPROVED.value)
            .update({Task.status: new_status.value}, synchronize_session=False)
        )
        if updated == 0:
            raise InvalidStatus("Task has already been approved.")
        if creator is not None:
            db.query(User).filter(User.id == creator.id).update(
                {User.score: User.score + delta}, synchronize_session=False
            )

    if creator is None:
        logger.warning("Task %s creator %r has no user record; score not adjusted", task_id, task.creator)
        return []

    db.refresh(creator)
    logger.info(
        "Task %s %s by %s; %s score %+d -> %d",
        task_id, decision.lower(), approver, creator.username, delta, creator.score,
    )

    if not creator.email:
        return []
    if decision == TaskStatus.APPROVED.value:
        return [approval_notice(creator.email, creator.username, task.title, approver, creator.score)]
    return [rejection_notice(creator.email, creator.username, task.title, approver, creator.score)]
