"""Repository factory and exports"""
from supabase import Client
from .notes import NoteRepository
from .attachments import AttachmentRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._notes: NoteRepository = None
        self._attachments: AttachmentRepository = None

    @property
    def notes(self) -> NoteRepository:
        """Get notes repository"""
        if self._notes is None:
            self._notes = NoteRepository(self._client)
        return self._notes

    @property
    def attachments(self) -> AttachmentRepository:
        """Get attachments repository"""
        if self._attachments is None:
            self._attachments = AttachmentRepository(self._client)
        return self._attachments

    @property
    def client(self) -> Client:
        return self._client


__all__ = [
    'RepositoryFactory',
    'NoteRepository',
    'AttachmentRepository',
]
