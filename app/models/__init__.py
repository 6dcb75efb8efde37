"""Domain models for the application"""
from .note import Attachment, FileUpload, Note, NoteCreate, NoteUpdate
from .user import SessionUser

__all__ = [
    'Attachment', 'FileUpload',
    'Note', 'NoteCreate', 'NoteUpdate',
    'SessionUser',
]
