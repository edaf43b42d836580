# This project was developed with assistance from AI tools.
"""Failure envelope returned by every error handler."""

from typing import Literal

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable error code, e.g. FIELD_NOT_EDITABLE.")
    message: str = Field(description="Human-readable message shown to the user as-is.")


class ErrorResponse(BaseModel):
    """``{"success": false, "error": {"code", "message"}}``."""

    success: Literal[False] = False
    error: ErrorDetail
