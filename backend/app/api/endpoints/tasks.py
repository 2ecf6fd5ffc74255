"""
app/api/endpoints/tasks.py
───────────────────────────
Workshop tasks.

Routes
------
GET   /api/tasks        Tasks, optionally filtered by status or linked order.
POST  /api/tasks        Create a task.
PATCH /api/tasks/{id}   Update a task (status changes, reassignment…).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from supabase import Client

from app.api.dependencies import get_db
from app.api.responses import cache_list
from schemas.tasks import TaskCreate, TaskOut, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[TaskOut], summary="List tasks")
def list_tasks(
    response: Response,
    status: Optional[TaskStatus] = Query(default=None),
    linked_order_id: Optional[str] = Query(default=None),
    db: Client = Depends(get_db),
) -> List[TaskOut]:
    query = db.table("tasks").select("*")
    if status:
        query = query.eq("status", status)
    if linked_order_id:
        query = query.eq("linked_order_id", linked_order_id)
    res = query.order("due_date").execute()
    cache_list(response)
    return res.data or []


@router.post("", response_model=TaskOut, status_code=201, summary="Create a task")
def create_task(body: TaskCreate, db: Client = Depends(get_db)) -> TaskOut:
    res = db.table("tasks").insert(body.model_dump(mode="json")).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create task")
    logger.info("Created task %r", body.title)
    return res.data[0]


@router.patch("/{task_id}", response_model=TaskOut, summary="Update a task")
def update_task(task_id: str, body: TaskUpdate, db: Client = Depends(get_db)) -> TaskOut:
    changes = body.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    res = db.table("tasks").update(changes).eq("id", task_id).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"Task '{task_id}' not found")
    return res.data[0]
