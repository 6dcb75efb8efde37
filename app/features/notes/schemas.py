"""Request/response schemas for the Notes feature"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, computed_field

from app.features.notes.domain import SortKey
from app.models.note import Attachment, Note
from app.utils.file_helper import format_file_size, get_file_kind


class AttachmentOut(Attachment):
    """Attachment with display helpers"""

    @computed_field
    @property
    def size_label(self) -> str:
        return format_file_size(self.size)

    @computed_field
    @property
    def kind(self) -> str:
        return get_file_kind(self.type)


class NoteOut(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    tags: List[str]
    attachments: List[AttachmentOut]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note) -> "NoteOut":
        return cls(
            **note.model_dump(exclude={"attachments"}),
            attachments=[AttachmentOut(**a.model_dump()) for a in note.attachments],
        )


class NoteListResponse(BaseModel):
    notes: List[NoteOut]
    all_tags: List[str]
    search: str = ""
    tag: str = ""
    sort: SortKey = SortKey.UPDATED
    error: Optional[str] = None


class NoteUpdateRequest(BaseModel):
    """Partial edit; tags accept a list or the raw comma separated field"""
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None
