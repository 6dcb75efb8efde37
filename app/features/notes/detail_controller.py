"""Note detail controller - ownership-checked view, edit and confirmed delete"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.features.auth.session import SessionContext
from app.features.notes.domain import (
    ConfirmationRequired,
    DetailStatus,
    ErrorKind,
    ValidationFailed,
    normalize_tags,
    parse_tags,
    validate_note_fields,
)
from app.infra.supabase.errors import DeleteFailed, StoreError
from app.infra.supabase.repositories.attachments import AttachmentRepository
from app.infra.supabase.repositories.notes import NoteRepository
from app.models.note import Note, NoteUpdate

logger = logging.getLogger(__name__)


@dataclass
class NoteDetailState:
    status: DetailStatus = DetailStatus.IDLE
    note: Optional[Note] = None
    confirming_delete: bool = False
    is_deleting: bool = False
    is_saving: bool = False
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class NoteDetailController:
    """Loads one note for its owner and exposes edit and delete"""

    def __init__(
        self,
        session: SessionContext,
        notes: NoteRepository,
        attachments: AttachmentRepository
    ):
        self._session = session
        self._notes = notes
        self._attachments = attachments
        self.state = NoteDetailState()

    @property
    def note(self) -> Optional[Note]:
        """The loaded note; only ever set for its owner"""
        return self.state.note

    async def load(self, note_id: str, current_user_id: Optional[str] = None) -> DetailStatus:
        """
        Fetch a note and decide what the requesting user may see.

        Args:
            note_id: Note to show
            current_user_id: Requesting user, defaults to the session's user

        Returns:
            READY, NOT_FOUND, FORBIDDEN or ERROR
        """
        user_id = current_user_id or self._session.user_id
        self.state = NoteDetailState(status=DetailStatus.LOADING)

        try:
            note = await self._notes.get_by_id(note_id)
        except StoreError as e:
            logger.error(f"Loading note {note_id} failed: {e}")
            self.state = NoteDetailState(
                status=DetailStatus.ERROR, error=e.user_message, error_kind=ErrorKind.BACKEND
            )
            return self.state.status

        if note is None:
            self.state = NoteDetailState(status=DetailStatus.NOT_FOUND)
        elif not note.is_owned_by(user_id):
            logger.warning(f"User {user_id} denied access to note {note_id}")
            self.state = NoteDetailState(status=DetailStatus.FORBIDDEN)
        else:
            self.state = NoteDetailState(status=DetailStatus.READY, note=note)

        return self.state.status

    def request_delete(self) -> None:
        """First step of deletion; the user still has to confirm"""
        if self.state.note is not None:
            self.state.confirming_delete = True

    def cancel_delete(self) -> None:
        self.state.confirming_delete = False

    async def delete(self) -> bool:
        """
        Delete the loaded note after confirmation.

        Returns:
            True when the note is gone and the caller should leave the
            detail view, False when deletion failed and the note stays.

        Raises:
            ConfirmationRequired: request_delete() was not called first
        """
        note = self.state.note
        if note is None or not self.state.confirming_delete:
            raise ConfirmationRequired("Deleting a note needs confirmation")

        self.state.is_deleting = True
        try:
            await self._notes.delete_note(note.id, owner_id=note.user_id)
        except StoreError as e:
            logger.error(f"Deleting note {note.id} failed: {e}")
            self.state.is_deleting = False
            self.state.confirming_delete = False
            self.state.error = e.user_message
            self.state.error_kind = ErrorKind.BACKEND
            return False

        await self._remove_blobs([a.path for a in note.attachments])

        self.state = NoteDetailState(status=DetailStatus.DELETED)
        return True

    async def update(
        self,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[str | List[str]] = None
    ) -> bool:
        """
        Edit the loaded note.

        Tags may be given as the raw comma separated field or as a list.
        Returns True on success; on failure the error is recorded and the
        previous note stays loaded.
        """
        note = self.state.note
        if note is None:
            raise ValueError("No note loaded")

        try:
            validate_note_fields(
                title if title is not None else note.title,
                content if content is not None else note.content,
            )
        except ValidationFailed as e:
            self.state.error = str(e)
            self.state.error_kind = ErrorKind.VALIDATION
            return False

        changes = {}
        if title is not None:
            changes["title"] = title.strip()
        if content is not None:
            changes["content"] = content
        if tags is not None:
            changes["tags"] = parse_tags(tags) if isinstance(tags, str) else normalize_tags(tags)
        fields = NoteUpdate(**changes)

        self.state.is_saving = True
        try:
            updated = await self._notes.update_note(note.id, fields, owner_id=note.user_id)
        except StoreError as e:
            logger.error(f"Updating note {note.id} failed: {e}")
            self.state.is_saving = False
            self.state.error = e.user_message
            self.state.error_kind = ErrorKind.BACKEND
            return False

        if updated is None:
            self.state = NoteDetailState(status=DetailStatus.NOT_FOUND)
            return False

        self.state = NoteDetailState(status=DetailStatus.READY, note=updated)
        return True

    async def _remove_blobs(self, paths: List[str]) -> None:
        # the note is already gone; orphaned blobs are logged, not surfaced
        try:
            await self._attachments.delete_many(paths)
        except DeleteFailed as e:
            logger.warning(f"Note deleted but attachments remain: {e}")
