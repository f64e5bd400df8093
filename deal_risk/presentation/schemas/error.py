"""Pydantic schema for API error responses."""

from typing import List

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["DEAL_NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Deal not found: deal_123"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )
    field: str | None = Field(
        None,
        description="First invalid field (validation errors only)",
    )
    errors: List[str] | None = Field(
        None,
        description="Every validation error found (validation errors only)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "VALIDATION_ERROR",
                    "message": "low_max must be less than high_min",
                    "request_id": "abc123",
                    "field": "band_thresholds",
                    "errors": ["low_max must be less than high_min"],
                }
            ]
        }
    }
