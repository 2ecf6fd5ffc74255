"""
app/api/endpoints/clients.py
─────────────────────────────
Client (customer) endpoints.

Routes
------
GET  /api/clients        All clients as dropdown options, sorted by name.
GET  /api/clients/{id}   Full client record.
POST /api/clients        Create a client.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from supabase import Client

from app.api.dependencies import get_db
from app.api.responses import cache_list
from schemas.catalog import DropdownOption, to_options
from schemas.clients import ClientCreate, ClientOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[DropdownOption], summary="List clients")
def list_clients(response: Response, db: Client = Depends(get_db)) -> list[DropdownOption]:
    res = db.table("clients").select("id, name").order("name").execute()
    cache_list(response)
    return to_options(res.data or [])


@router.get("/{client_id}", response_model=ClientOut, summary="Get a client")
def get_client(client_id: str, db: Client = Depends(get_db)) -> ClientOut:
    """
    Raises:
        HTTPException 404: Unknown client id.
    """
    res = db.table("clients").select("*").eq("id", client_id).limit(1).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"Client '{client_id}' not found")
    return res.data[0]


@router.post("", response_model=ClientOut, status_code=201, summary="Create a client")
def create_client(body: ClientCreate, db: Client = Depends(get_db)) -> ClientOut:
    res = db.table("clients").insert(body.model_dump()).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create client")
    logger.info("Created client %s (id=%s)", body.name, res.data[0]["id"])
    return res.data[0]
