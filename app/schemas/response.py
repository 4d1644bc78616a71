"""
app/schemas/response.py

Purpose: Error envelope shared by every failing endpoint
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Message safe to show the user")
    code: str = Field(..., description="Stable machine-readable code, e.g. LOCATION_MISMATCH")
    details: Optional[Any] = Field(default=None, description="Field errors, strike counts, observed values")


def error_response(status_code: int, error: str, code: str, details: Any = None) -> JSONResponse:
    body = ErrorResponse(error=error, code=code, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())
