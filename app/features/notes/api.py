"""Notes API endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile

from app.features.auth.dependencies import get_repositories, get_session
from app.features.auth.session import SessionContext
from app.features.notes.creation_controller import NoteCreationController
from app.features.notes.detail_controller import NoteDetailController
from app.features.notes.domain import DetailStatus, ErrorKind, SortKey
from app.features.notes.list_controller import NoteListController
from app.features.notes.schemas import NoteListResponse, NoteOut, NoteUpdateRequest
from app.infra.supabase.repositories import RepositoryFactory
from app.models.note import FileUpload

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/notes", tags=["notes"])


def _detail_controller(session: SessionContext, repos: RepositoryFactory) -> NoteDetailController:
    return NoteDetailController(session, repos.notes, repos.attachments)


async def _load_owned(controller: NoteDetailController, note_id: str) -> None:
    """Load a note or raise the HTTP error matching the detail state"""
    status = await controller.load(note_id)

    if status == DetailStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Note not found")
    if status == DetailStatus.FORBIDDEN:
        raise HTTPException(status_code=403, detail="You do not have access to this note")
    if status == DetailStatus.ERROR:
        raise HTTPException(status_code=503, detail=controller.state.error)


def _raise_for_error(error: str, kind: ErrorKind) -> None:
    status_code = 422 if kind == ErrorKind.VALIDATION else 503
    raise HTTPException(status_code=status_code, detail=error)


@router.get("", response_model=NoteListResponse)
async def list_notes(
    search: str = Query(""),
    tag: str = Query(""),
    sort: SortKey = Query(SortKey.UPDATED),
    session: SessionContext = Depends(get_session),
    repos: RepositoryFactory = Depends(get_repositories),
):
    """
    List the caller's notes.

    A non-blank ``search`` matches title, content and tags case-insensitively.
    ``tag`` narrows the result to notes carrying that exact tag and ``sort``
    orders it (updated/created newest first, title A-Z).
    """
    controller = NoteListController(session, repos.notes, quiet_period=0)
    controller.state.search_term = search
    controller.set_selected_tag(tag)
    controller.set_sort_key(sort)

    await controller.activate()

    if controller.state.error:
        raise HTTPException(status_code=503, detail=controller.state.error)

    return NoteListResponse(
        notes=[NoteOut.from_note(n) for n in controller.visible_notes],
        all_tags=controller.all_tags,
        search=search,
        tag=tag,
        sort=sort,
    )


@router.post("", response_model=NoteOut, status_code=201)
async def create_note(
    title: str = Form(""),
    content: str = Form(""),
    tags: str = Form(""),
    files: List[UploadFile] = File(default=[]),
    session: SessionContext = Depends(get_session),
    repos: RepositoryFactory = Depends(get_repositories),
):
    """
    Create a note from a multipart form.

    ``tags`` is the raw comma separated field; ``files`` are stored as
    attachments of the new note.
    """
    controller = NoteCreationController(session, repos.notes, repos.attachments)
    controller.set_fields(title=title, content=content, tags=tags)
    controller.add_files([
        FileUpload(
            name=f.filename or "file",
            data=await f.read(),
            content_type=f.content_type or "application/octet-stream",
        )
        for f in files
    ])

    note_id = await controller.submit()
    if note_id is None:
        _raise_for_error(controller.error, controller.error_kind)

    detail = _detail_controller(session, repos)
    await _load_owned(detail, note_id)
    return NoteOut.from_note(detail.note)


@router.get("/{note_id}", response_model=NoteOut)
async def get_note(
    note_id: str,
    session: SessionContext = Depends(get_session),
    repos: RepositoryFactory = Depends(get_repositories),
):
    """Get one note. Notes of other users answer 403 without any content."""
    controller = _detail_controller(session, repos)
    await _load_owned(controller, note_id)
    return NoteOut.from_note(controller.note)


@router.patch("/{note_id}", response_model=NoteOut)
async def update_note(
    note_id: str,
    request: NoteUpdateRequest,
    session: SessionContext = Depends(get_session),
    repos: RepositoryFactory = Depends(get_repositories),
):
    controller = _detail_controller(session, repos)
    await _load_owned(controller, note_id)

    updated = await controller.update(
        title=request.title,
        content=request.content,
        tags=request.tags,
    )
    if not updated:
        if controller.state.status == DetailStatus.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Note not found")
        _raise_for_error(controller.state.error, controller.state.error_kind)

    return NoteOut.from_note(controller.note)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    session: SessionContext = Depends(get_session),
    repos: RepositoryFactory = Depends(get_repositories),
):
    """Delete a note and its attachments. Requires ``confirm=true``."""
    controller = _detail_controller(session, repos)
    await _load_owned(controller, note_id)

    if not confirm:
        raise HTTPException(status_code=400, detail="Deletion must be confirmed with confirm=true")

    controller.request_delete()
    if not await controller.delete():
        raise HTTPException(status_code=503, detail=controller.state.error)

    return Response(status_code=204)
