"""Response envelope shared by every endpoint: {success, message, data?}."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Successful result wrapper."""

    success: bool = Field(default=True)
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: DataT | None = Field(default=None)


class ListResponse(BaseModel, Generic[DataT]):
    """Successful list result with an item count."""

    success: bool = Field(default=True)
    count: int = Field(..., ge=0)
    data: list[DataT] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Failure envelope; ``code`` names the failure kind, ``error`` carries detail in dev only."""

    success: bool = Field(default=False)
    message: str
    code: str | None = None
    error: Any | None = None
