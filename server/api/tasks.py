# server/api/tasks.py

from datetime import date
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, File, UploadFile, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from api.auth import get_context, get_current_user
from core import lifecycle
from core.context import ServiceContext
from core.errors import NoFile
from core.notifier import dispatch
from database import get_db


router = APIRouter(prefix="/tasks", tags=["tasks"])


# -------------------------------
# Schemas
# -------------------------------

class TaskIn(BaseModel):
    """
    Body for creating or replacing a task.
    """
    title: str
    description: str
    due_date: date
    assignee: str


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    due_date: date
    creator: str
    assignee: str
    status: str
    proof: str | None = None


def _out(task) -> dict:
    return TaskOut.model_validate(task).model_dump(mode="json")


# -------------------------------
# Task CRUD
# -------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    req: TaskIn,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    task = lifecycle.create_task(db, current_user, req.title, req.description, req.due_date, req.assignee)
    return {"message": "Task created successfully.", "task": _out(task)}


@router.get("", response_model=list[TaskOut])
def list_created_tasks(
    creator: str | None = None,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    """
    Pending tasks created by the caller, or by `creator` when given.
    """
    return lifecycle.list_created(db, creator or current_user)


@router.get("/validate", response_model=list[TaskOut])
def list_tasks_to_validate(
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    """
    Pending tasks waiting on the caller's decision.
    """
    return lifecycle.list_assigned(db, current_user)


@router.put("/{task_id}")
def update_task(
    task_id: int,
    req: TaskIn,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
    current_user: str = Depends(get_current_user),
):
    task = lifecycle.update_task(
        db,
        task_id,
        current_user,
        req.title,
        req.description,
        req.due_date,
        req.assignee,
        enforce_ownership=ctx.settings.enforce_ownership,
    )
    return {"message": "Task updated successfully.", "task": _out(task)}


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
    current_user: str = Depends(get_current_user),
):
    lifecycle.delete_task(db, task_id, current_user, enforce_ownership=ctx.settings.enforce_ownership)
    return {"message": "Task deleted successfully."}


# -------------------------------
# Proof & Validation
# -------------------------------

@router.post("/{task_id}/proof")
def submit_proof(
    task_id: int,
    background_tasks: BackgroundTasks,
    proof: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
    current_user: str = Depends(get_current_user),
):
    if proof is None or not proof.filename:
        raise NoFile()

    ref, notices = lifecycle.submit_proof(
        db,
        ctx.sink,
        task_id,
        proof.filename,
        proof.file.read(),
        current_user,
        attempts=ctx.settings.upload_attempts,
        backoff=ctx.settings.upload_backoff_seconds,
    )
    background_tasks.add_task(dispatch, ctx.notifier, notices)
    return {"message": "Proof submitted successfully.", "proof": ref}


@router.get("/{task_id}/proof")
def fetch_proof(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    return {"proof": lifecycle.fetch_proof(db, task_id)}


@router.post("/{task_id}/validate")
def validate_task(
    task_id: int,
    background_tasks: BackgroundTasks,
    decision: Any = Body(None, embed=True, alias="status"),
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
    current_user: str = Depends(get_current_user),
):
    notices = lifecycle.validate_task(
        db,
        task_id,
        decision,
        current_user,
        ctx.today(),
        enforce_ownership=ctx.settings.enforce_ownership,
    )
    background_tasks.add_task(dispatch, ctx.notifier, notices)
    return {"message": "Task status updated successfully."}
