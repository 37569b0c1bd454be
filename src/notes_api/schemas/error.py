from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response, e.g. {"message": "Email already exists", "status": "409 CONFLICT", "instant": "..."}."""
    message: str
    status: str
    instant: str
