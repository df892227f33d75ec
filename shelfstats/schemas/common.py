"""
Error envelope shared by every endpoint.
"""
from typing import Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    code: str = Field(examples=["STATS_PRIVATE"])
    message: str
    details: Optional[dict[str, Any]] = None
