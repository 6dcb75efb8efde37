"""Attachments repository backed by Supabase Storage"""
import asyncio
import logging
import time
from pathlib import PurePosixPath
from typing import Callable, List, Optional

import httpx
from storage3.utils import StorageException
from supabase import Client  # type: ignore

from app import config
from app.infra.supabase.errors import DeleteFailed, UploadFailed
from app.models.note import Attachment, FileUpload

logger = logging.getLogger(__name__)


def safe_file_name(original_name: str) -> str:
    """Last path component of a client supplied file name"""
    name = PurePosixPath(original_name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return "file"
    return name


def build_object_path(owner_id: str, note_id: str, original_name: str, timestamp_ms: int) -> str:
    """Storage path of an attachment: {owner}/{note}/{timestamp}_{name}"""
    return f"{owner_id}/{note_id}/{timestamp_ms}_{safe_file_name(original_name)}"


class AttachmentRepository:
    """Repository for note attachment blobs"""

    def __init__(
        self,
        client: Client,
        bucket: Optional[str] = None,
        clock: Callable[[], float] = time.time
    ):
        self._client = client
        self._bucket = bucket or config.ATTACHMENTS_BUCKET
        self._clock = clock

    def _bucket_api(self):
        return self._client.storage.from_(self._bucket)

    def _upload_sync(self, file: FileUpload, owner_id: str, note_id: str, timestamp_ms: int) -> Attachment:
        path = build_object_path(owner_id, note_id, file.name, timestamp_ms)

        try:
            bucket = self._bucket_api()
            bucket.upload(
                path=path,
                file=file.data,
                file_options={"content-type": file.content_type},
            )
            url = bucket.get_public_url(path)
        except (StorageException, httpx.HTTPError) as e:
            logger.error(f"Error uploading {file.name} to {path}: {e}")
            raise UploadFailed(f"Upload of {file.name} failed: {e}") from e

        return Attachment(
            name=safe_file_name(file.name),
            size=file.size,
            type=file.content_type,
            url=url,
            path=path,
        )

    async def upload(
        self,
        file: FileUpload,
        owner_id: str,
        note_id: str,
        timestamp_ms: Optional[int] = None
    ) -> Attachment:
        """
        Upload one file under the owner's and note's namespace.

        Args:
            file: Name, bytes and MIME type of the file
            owner_id: Owning user
            note_id: Note the file belongs to
            timestamp_ms: Path prefix, defaults to the current time

        Returns:
            Attachment metadata including the public URL

        Raises:
            UploadFailed: The storage call failed
        """
        if timestamp_ms is None:
            timestamp_ms = int(self._clock() * 1000)
        # the storage client is blocking; run it off the event loop
        attachment = await asyncio.to_thread(self._upload_sync, file, owner_id, note_id, timestamp_ms)
        logger.info(f"Uploaded attachment {attachment.path} ({attachment.size} bytes)")
        return attachment

    async def upload_many(self, files: List[FileUpload], owner_id: str, note_id: str) -> List[Attachment]:
        """
        Upload several files concurrently, all or nothing.

        If any upload fails, the uploads that succeeded are removed again and
        UploadFailed is raised.
        """
        if not files:
            return []

        # one millisecond per file keeps paths distinct for files sharing a name
        base_ms = int(self._clock() * 1000)
        results = await asyncio.gather(
            *[self.upload(file, owner_id, note_id, base_ms + i) for i, file in enumerate(files)],
            return_exceptions=True
        )

        uploaded = [r for r in results if isinstance(r, Attachment)]
        failures = [r for r in results if isinstance(r, BaseException)]

        if failures:
            logger.error(f"{len(failures)}/{len(files)} uploads failed for note {note_id}")
            if uploaded:
                try:
                    await self.delete_many([a.path for a in uploaded])
                except DeleteFailed as e:
                    logger.warning(f"Could not clean up partial uploads for note {note_id}: {e}")
            first = failures[0]
            if isinstance(first, UploadFailed):
                raise first
            raise UploadFailed(f"Upload failed: {first}") from first

        return uploaded

    async def delete(self, path: str) -> None:
        """
        Remove one blob.

        Raises:
            DeleteFailed: The storage call failed
        """
        await self.delete_many([path])

    async def delete_many(self, paths: List[str]) -> None:
        """Remove several blobs in one storage call"""
        if not paths:
            return

        try:
            await asyncio.to_thread(self._bucket_api().remove, paths)
        except (StorageException, httpx.HTTPError) as e:
            logger.error(f"Error deleting {paths}: {e}")
            raise DeleteFailed(f"Delete failed: {e}") from e

        logger.info(f"Deleted {len(paths)} attachment(s)")
