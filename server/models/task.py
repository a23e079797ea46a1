# server/models/task.py

import enum

from sqlalchemy import Column, Date, Integer, String, Text
from . import Base


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    due_date = Column(Date, nullable=False)
    creator = Column(String, index=True, nullable=False)
    assignee = Column(String, index=True, nullable=False)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value, server_default=TaskStatus.PENDING.value)
    proof = Column(String, nullable=True)
