"""Note domain model"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """File stored alongside a note"""
    name: str
    size: int
    type: str
    url: str
    path: str  # storage object path, needed to remove the blob later


class NoteBase(BaseModel):
    """Base note fields"""
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)


class NoteCreate(NoteBase):
    """Note creation model"""
    pass


class NoteUpdate(BaseModel):
    """Note update model - all fields optional"""
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[Attachment]] = None


class Note(NoteBase):
    """Complete note model from database"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.user_id == user_id

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match against title, content or any tag"""
        needle = term.lower()
        return (
            needle in self.title.lower()
            or needle in self.content.lower()
            or any(needle in tag.lower() for tag in self.tags)
        )


@dataclass
class FileUpload:
    """Raw file waiting to be stored as an attachment"""
    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)
