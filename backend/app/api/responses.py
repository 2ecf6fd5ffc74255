"""
app/api/responses.py
────────────────────
Response helpers shared by the endpoint modules.
"""

from fastapi import Response

# Public list endpoints: fresh for a minute, shared caches for two, then
# served stale for up to ten minutes while revalidating.
LIST_CACHE_CONTROL = "public, max-age=60, s-maxage=120, stale-while-revalidate=600"

# Per-user data must not land in shared caches.
PRIVATE_CACHE_CONTROL = "private, max-age=10, stale-while-revalidate=30"


def cache_list(response: Response) -> None:
    """Attach the list-endpoint caching headers."""
    response.headers["Cache-Control"] = LIST_CACHE_CONTROL
    response.headers["Vary"] = "Accept, Accept-Encoding"


def cache_private(response: Response) -> None:
    response.headers["Cache-Control"] = PRIVATE_CACHE_CONTROL
