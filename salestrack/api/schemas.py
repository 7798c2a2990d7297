from pydantic import BaseModel
from typing import List

class FieldErrorOut(BaseModel):
    field: str
    message: str

class ValidationErrorResponse(BaseModel):
    error: str
    details: List[FieldErrorOut]
    correlation_id: str | None = None

class NotFoundResponse(BaseModel):
    error: str
    message: str
    id: str
    correlation_id: str | None = None

class ServerErrorResponse(BaseModel):
    error: str
    correlation_id: str | None = None
