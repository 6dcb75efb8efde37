"""Note creation controller - draft handling and submission with attachments"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from app.features.auth.session import SessionContext
from app.features.notes.domain import ErrorKind, ValidationFailed, parse_tags, validate_note_fields
from app.infra.supabase.errors import StoreError
from app.infra.supabase.repositories.attachments import AttachmentRepository
from app.infra.supabase.repositories.notes import NoteRepository
from app.models.note import Attachment, FileUpload, NoteCreate, NoteUpdate

logger = logging.getLogger(__name__)


@dataclass
class PendingAttachment:
    """A selected file that has not been uploaded yet"""
    id: str
    file: FileUpload

    @property
    def name(self) -> str:
        return self.file.name

    @property
    def size(self) -> int:
        return self.file.size

    @property
    def type(self) -> str:
        return self.file.content_type


@dataclass
class NoteDraft:
    title: str = ""
    content: str = ""
    tags: str = ""  # raw comma separated field
    attachments: List[PendingAttachment] = field(default_factory=list)


class NoteCreationController:
    """
    Collects a draft and persists it together with its attachments.

    Submission creates the note first so the store assigns its id, uploads
    the pending files under that id, then records their metadata on the
    note. A failure after the note exists rolls back whatever was written.
    """

    def __init__(
        self,
        session: SessionContext,
        notes: NoteRepository,
        attachments: AttachmentRepository
    ):
        self._session = session
        self._notes = notes
        self._attachments = attachments
        self.draft = NoteDraft()
        self.is_submitting = False
        self.error: Optional[str] = None
        self.error_kind: Optional[ErrorKind] = None
        self.created_note_id: Optional[str] = None

    def set_fields(
        self,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[str] = None
    ) -> None:
        if title is not None:
            self.draft.title = title
        if content is not None:
            self.draft.content = content
        if tags is not None:
            self.draft.tags = tags

    def add_files(self, files: Iterable[FileUpload]) -> List[str]:
        """Queue files from a picker or a drop; returns their pending ids"""
        added = [PendingAttachment(id=uuid.uuid4().hex, file=f) for f in files]
        self.draft.attachments.extend(added)
        return [p.id for p in added]

    def remove_attachment(self, pending_id: str) -> None:
        self.draft.attachments = [p for p in self.draft.attachments if p.id != pending_id]

    async def submit(self) -> Optional[str]:
        """
        Persist the draft.

        Returns:
            The new note id, or None when validation or a remote call failed
            (the reason is in ``error`` and the draft is kept for retry)
        """
        self.error = None
        self.error_kind = None
        try:
            validate_note_fields(self.draft.title, self.draft.content)
        except ValidationFailed as e:
            self.error = str(e)
            self.error_kind = ErrorKind.VALIDATION
            return None

        owner_id = self._session.user_id
        note = NoteCreate(
            title=self.draft.title.strip(),
            content=self.draft.content,
            tags=parse_tags(self.draft.tags),
        )
        files = [p.file for p in self.draft.attachments]

        self.is_submitting = True
        try:
            note_id = await self._notes.create(note, owner_id)
        except StoreError as e:
            logger.error(f"Creating note failed: {e}")
            self.error = e.user_message
            self.error_kind = ErrorKind.BACKEND
            self.is_submitting = False
            return None

        if files:
            try:
                await self._attach(note_id, owner_id, files)
            except StoreError as e:
                logger.error(f"Attaching files to note {note_id} failed: {e}")
                self.error = e.user_message
                self.error_kind = ErrorKind.BACKEND
                self.is_submitting = False
                return None

        logger.info(f"Note {note_id} created with {len(files)} attachment(s)")
        self.created_note_id = note_id
        self.draft = NoteDraft()
        self.is_submitting = False
        return note_id

    async def _attach(self, note_id: str, owner_id: str, files: List[FileUpload]) -> None:
        try:
            uploaded = await self._attachments.upload_many(files, owner_id, note_id)
        except StoreError:
            await self._rollback(note_id, owner_id, [])
            raise

        try:
            await self._notes.update_note(
                note_id, NoteUpdate(attachments=uploaded), owner_id=owner_id
            )
        except StoreError:
            await self._rollback(note_id, owner_id, uploaded)
            raise

    async def _rollback(self, note_id: str, owner_id: str, uploaded: List[Attachment]) -> None:
        """Best effort removal of a half-created note"""
        if uploaded:
            try:
                await self._attachments.delete_many([a.path for a in uploaded])
            except StoreError as e:
                logger.warning(f"Rollback left blobs behind for note {note_id}: {e}")
        try:
            await self._notes.delete_note(note_id, owner_id=owner_id)
        except StoreError as e:
            logger.warning(f"Rollback could not delete note {note_id}: {e}")
