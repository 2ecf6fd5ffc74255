"""
app/api/endpoints/not_found.py
───────────────────────────────
Target of ``DisabledRouteMiddleware`` rewrites: 404 for every method.
"""

from fastapi import APIRouter, HTTPException

router = APIRouter()


@router.api_route(
    "/not-found",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def not_found() -> None:
    raise HTTPException(status_code=404, detail="Not found")
