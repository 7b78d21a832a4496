"""Response envelope shared by every route."""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Discriminated result envelope: ``{success, message?, data?}``."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class MessageResponse(BaseModel):
    """Envelope for operations that return no data."""
    success: bool = True
    message: str
