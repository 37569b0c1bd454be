from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CreateNoteDTO(BaseModel):
    """
    Body of POST /notes and PUT /notes/{id}.

    Both fields are optional; blank or missing values are stored as "".
    The 255 character title limit is checked by NoteService.
    """
    title: str | None = None
    content: str | None = None


class PublicNoteDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    updated_at: datetime
