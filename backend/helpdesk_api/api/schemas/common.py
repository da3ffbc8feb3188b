"""Response envelopes shared by every endpoint."""
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    success: bool = False
    error: str
