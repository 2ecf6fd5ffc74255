"""
schemas/tasks.py
────────────────
Workshop to-do items, optionally linked to an order.
"""

from datetime import date as Date
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


class TaskOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: str = "pending"
    priority: str = "medium"
    due_date: Optional[str] = None
    assigned_to: Optional[str] = None
    linked_order_id: Optional[str] = None
    created_at: Optional[str] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[Date] = None
    assigned_to: Optional[str] = None
    linked_order_id: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[Date] = None
    assigned_to: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
