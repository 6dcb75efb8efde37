"""Domain rules for the Notes feature"""

from enum import Enum
from typing import Iterable, List

from app.models.note import Note


class SortKey(str, Enum):
    """Sort orders offered by the note list"""
    UPDATED = "updated"
    CREATED = "created"
    TITLE = "title"


class DetailStatus(str, Enum):
    """States of the note detail view"""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    ERROR = "error"
    DELETED = "deleted"


class ErrorKind(str, Enum):
    """What went wrong, so the HTTP layer can pick a status code"""
    VALIDATION = "validation"
    BACKEND = "backend"


class ValidationFailed(ValueError):
    """Draft rejected before any remote call"""


class ConfirmationRequired(Exception):
    """A destructive action was attempted without prior confirmation"""


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Trim each tag and drop the empty ones"""
    return [tag.strip() for tag in tags if tag.strip()]


def parse_tags(raw: str) -> List[str]:
    """Split a comma separated tag field, trimming and dropping empty pieces"""
    return normalize_tags(raw.split(","))


def validate_note_fields(title: str, content: str) -> None:
    if not title.strip():
        raise ValidationFailed("Title is required")
    if not content.strip():
        raise ValidationFailed("Content is required")


def filter_by_tag(notes: Iterable[Note], tag: str) -> List[Note]:
    if not tag:
        return list(notes)
    return [note for note in notes if note.has_tag(tag)]


def sort_notes(notes: Iterable[Note], sort_key: SortKey) -> List[Note]:
    """
    Timestamps sort newest first; titles sort A-Z ignoring case, with case
    only deciding between otherwise equal titles. Python's sort is stable,
    so remaining ties keep their input order.
    """
    if sort_key == SortKey.UPDATED:
        return sorted(notes, key=lambda n: n.updated_at, reverse=True)
    if sort_key == SortKey.CREATED:
        return sorted(notes, key=lambda n: n.created_at, reverse=True)
    if sort_key == SortKey.TITLE:
        return sorted(notes, key=lambda n: (n.title.casefold(), n.title))
    return list(notes)


def collect_tags(notes: Iterable[Note]) -> List[str]:
    """Distinct tags across notes, in order of first appearance"""
    seen = {}
    for note in notes:
        for tag in note.tags:
            seen.setdefault(tag, None)
    return list(seen)
