"""
schemas/clients.py
──────────────────
Client (customer) records.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class ClientOut(BaseModel):
    id: str
    name: str
    client_type: Literal["regular", "contract"] = "regular"
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    client_type: Literal["regular", "contract"] = "regular"
    phone: Optional[str] = Field(default=None, max_length=40)
    email: Optional[str] = Field(default=None, max_length=200)
    address: Optional[str] = None
