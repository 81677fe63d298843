"""Pydantic DTOs (Data Transfer Objects) for product edits."""

from pydantic import BaseModel, Field


class FieldUpdate(BaseModel):
    """Schema for a single-field inline edit.

    The raw value is passed through untouched; numeric parsing and bounds
    belong to the mutation service so that every caller gets the same rules.
    """

    value: str | int | float = Field(..., examples=["120.00", 5])
