"""File API schemas."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FileUploadResponse(BaseModel):
    """Response for POST /files (record created). Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    file_name: str
    file_size: int
    mime_type: str
    url: str = Field(..., description="Public download path for the file")
    file_type: str


class MessageResponse(BaseModel):
    """Plain confirmation message (e.g. DELETE /files/{id})."""

    message: str


class ErrorResponse(BaseModel):
    """Error body produced by the exception handlers."""

    error: str
    message: str
    details: dict = Field(default_factory=dict)
