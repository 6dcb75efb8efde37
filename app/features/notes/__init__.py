"""Notes feature module"""

from app.features.notes.api import router
from app.features.notes.creation_controller import NoteCreationController
from app.features.notes.detail_controller import NoteDetailController
from app.features.notes.list_controller import NoteListController
from app.features.notes.domain import (
    ConfirmationRequired,
    DetailStatus,
    ErrorKind,
    SortKey,
    ValidationFailed,
)

__all__ = [
    "router",
    "NoteCreationController",
    "NoteDetailController",
    "NoteListController",
    "ConfirmationRequired",
    "DetailStatus",
    "ErrorKind",
    "SortKey",
    "ValidationFailed",
]
