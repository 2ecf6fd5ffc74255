"""
schemas/catalog.py
──────────────────
Dropdown-facing schemas shared by categories, items and clients.

The UI comboboxes consume ``{value, label}`` pairs, so list endpoints for
those resources return :class:`DropdownOption` rather than raw rows.
"""

from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, Field, field_validator


class DropdownOption(BaseModel):
    """One entry of a dropdown list."""

    value: str
    label: str


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class ItemCreate(CategoryCreate):
    category_id: str = Field(..., min_length=1)


def to_options(rows: Iterable[Dict[str, Any]]) -> List[DropdownOption]:
    """
    Convert ``{id, name}`` rows into options sorted by label.

    Rows without an id are dropped; a missing name falls back to the id.
    """
    options = [
        DropdownOption(value=str(row["id"]), label=str(row.get("name") or row["id"]))
        for row in rows
        if row.get("id") is not None
    ]
    return sorted(options, key=lambda o: o.label.lower())
