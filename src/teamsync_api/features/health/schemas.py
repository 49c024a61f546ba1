"""Response models for the root status endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class ApiStatusResponse(BaseModel):
    message: str
    version: str


__all__ = ["ApiStatusResponse"]
