"""Tests for the note creation controller"""
import pytest

from app.features.notes.creation_controller import NoteCreationController
from app.features.notes.domain import ErrorKind
from app.models.note import FileUpload

from .conftest import USER_1


@pytest.fixture()
def controller(session, repos):
    return NoteCreationController(session, repos.notes, repos.attachments)


async def test_submit_creates_note_with_parsed_tags(controller, repos):
    controller.set_fields(title="Personal Todo List", content="1. Buy groceries", tags="personal, todo")

    note_id = await controller.submit()

    assert note_id is not None
    assert controller.created_note_id == note_id
    note = await repos.notes.get_by_id(note_id)
    assert note.user_id == USER_1
    assert note.tags == ["personal", "todo"]
    assert note.attachments == []


async def test_submit_clears_draft_on_success(controller):
    controller.set_fields(title="t", content="c", tags="a")
    controller.add_files([FileUpload(name="a.txt", data=b"a")])

    await controller.submit()

    assert controller.draft.title == ""
    assert controller.draft.attachments == []
    assert controller.is_submitting is False


@pytest.mark.parametrize("title, content", [("", "body"), ("   ", "body"), ("Title", "")])
async def test_invalid_draft_makes_no_remote_call(controller, fake_supabase, title, content):
    controller.set_fields(title=title, content=content)

    assert await controller.submit() is None

    assert controller.error_kind == ErrorKind.VALIDATION
    assert fake_supabase.queries == []


async def test_title_is_trimmed_and_blank_tags_dropped(controller, repos):
    controller.set_fields(title="  Trip  ", content="pack", tags=" , ")

    note = await repos.notes.get_by_id(await controller.submit())

    assert note.title == "Trip"
    assert note.tags == []


async def test_attachments_are_uploaded_and_recorded(controller, repos, fake_supabase):
    controller.set_fields(title="Report", content="see file")
    controller.add_files([
        FileUpload(name="report.pdf", data=b"x" * 2048, content_type="application/pdf"),
        FileUpload(name="photo.png", data=b"y" * 10, content_type="image/png"),
    ])

    note_id = await controller.submit()

    note = await repos.notes.get_by_id(note_id)
    assert [a.name for a in note.attachments] == ["report.pdf", "photo.png"]
    assert [a.size for a in note.attachments] == [2048, 10]
    assert [a.type for a in note.attachments] == ["application/pdf", "image/png"]
    assert all(a.path.startswith(f"{USER_1}/{note_id}/") for a in note.attachments)
    assert len(fake_supabase.blobs) == 2


async def test_removed_pending_file_is_not_uploaded(controller, repos):
    controller.set_fields(title="t", content="c")
    keep_id, drop_id = controller.add_files([
        FileUpload(name="keep.txt", data=b"k"),
        FileUpload(name="drop.txt", data=b"d"),
    ])
    assert keep_id != drop_id

    controller.remove_attachment(drop_id)
    note = await repos.notes.get_by_id(await controller.submit())

    assert [a.name for a in note.attachments] == ["keep.txt"]


async def test_pending_attachment_exposes_file_metadata(controller):
    controller.add_files([FileUpload(name="a.csv", data=b"1,2", content_type="text/csv")])

    pending = controller.draft.attachments[0]
    assert (pending.name, pending.size, pending.type) == ("a.csv", 3, "text/csv")


async def test_upload_failure_rolls_back_note_and_blobs(controller, fake_supabase):
    controller.set_fields(title="t", content="c", tags="x")
    controller.add_files([
        FileUpload(name="fine.txt", data=b"ok"),
        FileUpload(name="broken.txt", data=b"no"),
    ])
    fake_supabase.failing_uploads.add("broken")

    assert await controller.submit() is None

    assert controller.error_kind == ErrorKind.BACKEND
    assert controller.error
    assert fake_supabase.rows() == []
    assert fake_supabase.blobs == {}


async def test_draft_is_kept_after_failure(controller, fake_supabase):
    controller.set_fields(title="Keep me", content="c")
    controller.add_files([FileUpload(name="broken.txt", data=b"no")])
    fake_supabase.failing_uploads.add("broken")

    await controller.submit()

    assert controller.draft.title == "Keep me"
    assert len(controller.draft.attachments) == 1
    assert controller.created_note_id is None
    assert controller.is_submitting is False


async def test_create_failure_reports_backend_error(controller, fake_supabase):
    controller.set_fields(title="t", content="c")
    fake_supabase.failing_ops.add("insert")

    assert await controller.submit() is None
    assert controller.error_kind == ErrorKind.BACKEND
    assert fake_supabase.rows() == []


async def test_metadata_update_failure_removes_uploaded_blobs(controller, fake_supabase):
    controller.set_fields(title="t", content="c")
    controller.add_files([FileUpload(name="a.txt", data=b"a")])
    fake_supabase.failing_ops.add("update")

    assert await controller.submit() is None

    assert fake_supabase.blobs == {}
    assert fake_supabase.rows() == []
