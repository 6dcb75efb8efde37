"""Notes repository"""
import logging
from typing import List, Optional

from supabase import Client  # type: ignore

from app import config
from app.models.note import Note, NoteCreate, NoteUpdate

from .base import BaseRepository

logger = logging.getLogger(__name__)


class NoteRepository(BaseRepository[Note, NoteUpdate]):
    """Repository for notes operations"""

    def __init__(self, client: Client, table_name: Optional[str] = None):
        super().__init__(client, table_name or config.NOTES_TABLE, Note)

    async def create(self, note: NoteCreate, owner_id: str) -> str:
        """
        Persist a new note owned by owner_id.

        created_at and updated_at are left to the column defaults so both
        come from the database clock.

        Returns:
            The id assigned by the store
        """
        data = note.model_dump(mode='json')
        data["user_id"] = owner_id
        created = await self.insert(data)
        logger.info(f"Created note {created.id} for user {owner_id}")
        return created.id

    async def list_by_owner(self, owner_id: str) -> List[Note]:
        """All notes of one owner, most recently updated first"""
        notes = await self.find_by_filters({"user_id": owner_id})
        # ordering is not requested from the store to avoid a composite index
        return sorted(notes, key=lambda note: note.updated_at, reverse=True)

    async def get_by_id(self, note_id: str) -> Optional[Note]:
        return await self.find_by_id(note_id)

    async def update_note(
        self,
        note_id: str,
        fields: NoteUpdate,
        owner_id: Optional[str] = None
    ) -> Optional[Note]:
        """
        Apply a partial update.

        Args:
            note_id: Note to update
            fields: Only the fields explicitly set are written
            owner_id: When given, the row must also belong to this user

        Returns:
            The updated note, or None if no matching row exists
        """
        filters = {"user_id": owner_id} if owner_id else None
        return await self.update(note_id, fields, filters=filters)

    async def delete_note(self, note_id: str, owner_id: Optional[str] = None) -> None:
        """Remove a note. Idempotent: a missing note is not an error."""
        filters = {"user_id": owner_id} if owner_id else None
        deleted = await self.delete(note_id, filters=filters)
        if not deleted:
            logger.info(f"Delete of note {note_id} matched no rows")

    async def search_by_owner(self, owner_id: str, term: str) -> List[Note]:
        """
        Notes of one owner whose title, content or tags contain term.

        The whole collection is fetched and filtered here; there is no
        server-side text index.
        """
        notes = await self.list_by_owner(owner_id)
        return [note for note in notes if note.matches(term)]
