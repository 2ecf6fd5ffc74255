"""
schemas/accounts.py
───────────────────
User profiles, notifications and storage bootstrap responses.
"""

from typing import List, Optional

from pydantic import BaseModel


class ProfileOut(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str = "staff"
    status: str = "active"
    created_at: Optional[str] = None


class NotificationOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    title: Optional[str] = None
    message: str
    type: str = "info"
    is_read: bool = False
    created_at: Optional[str] = None
    timestamp: Optional[str] = None


class NotificationsPage(BaseModel):
    notifications: List[NotificationOut]


class StorageInitResponse(BaseModel):
    success: bool
    created: List[str] = []
    existing: List[str] = []
    failed: List[str] = []
