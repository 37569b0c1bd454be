import re

import pytest
from sqlalchemy import func, select

from notes_api.exceptions.errors import GENERIC_ERROR_MESSAGE
from notes_api.models.note import Note
from notes_api.services.note_service import NoteService
from notes_api.tests.test_api.test_users_api import assert_error


@pytest.mark.asyncio
class TestNotesCrud:

    async def test_create_then_get(self, client, user_account):
        """
        Behavior:
            - POST /notes -> 201, empty body, Location: /notes/{id}.
            - GET on that location returns the note.
        """
        resp = await client.post("/notes", json={"title": "groceries", "content": "milk"}, auth=user_account["auth"])
        assert resp.status_code == 201
        assert resp.content == b""
        location = resp.headers["Location"]
        assert re.fullmatch(r"/notes/\d+", location)

        note = await client.get(location, auth=user_account["auth"])
        assert note.status_code == 200
        body = note.json()
        assert body["title"] == "groceries"
        assert body["content"] == "milk"
        assert set(body) == {"id", "title", "content", "updated_at"}

    async def test_blank_note_is_accepted(self, client, user_account):
        resp = await client.post("/notes", json={"title": "  "}, auth=user_account["auth"])
        assert resp.status_code == 201
        note = (await client.get(resp.headers["Location"], auth=user_account["auth"])).json()
        assert note["title"] == ""
        assert note["content"] == ""

    async def test_missing_body(self, client, user_account):
        resp = await client.post("/notes", auth=user_account["auth"])
        assert_error(resp, 400, "Note to update/create cannot be null")

    async def test_title_too_long(self, client, user_account):
        resp = await client.post("/notes", json={"title": "t" * 256}, auth=user_account["auth"])
        assert_error(resp, 400, "Title must be less than 255 characters")

    async def test_put_creates_then_replaces(self, client, user_account):
        auth = user_account["auth"]

        created = await client.put("/notes/321", json={"title": "v1", "content": "first"}, auth=auth)
        assert created.status_code == 204
        replaced = await client.put("/notes/321", json={"title": "v2"}, auth=auth)
        assert replaced.status_code == 204

        note = (await client.get("/notes/321", auth=auth)).json()
        assert note["id"] == 321
        assert note["title"] == "v2"
        assert note["content"] == ""

    async def test_delete(self, client, user_account):
        auth = user_account["auth"]
        location = (await client.post("/notes", json={"title": "bye"}, auth=auth)).headers["Location"]

        assert (await client.delete(location, auth=auth)).status_code == 204
        assert_error(await client.get(location, auth=auth), 404, "Note not found")

    async def test_invalid_id(self, client, user_account):
        assert_error(await client.get("/notes/0", auth=user_account["auth"]), 400, "Invalid id")

    async def test_non_numeric_note_id_is_a_validation_error(self, client, user_account):
        assert_error(await client.get("/notes/abc", auth=user_account["auth"]), 400)


@pytest.mark.asyncio
class TestNotesIsolation:

    async def test_other_users_note_is_invisible(self, client, user_account, other_account):
        location = (
            await client.post("/notes", json={"title": "secret"}, auth=user_account["auth"])
        ).headers["Location"]

        assert_error(await client.get(location, auth=other_account["auth"]), 404)
        assert_error(await client.delete(location, auth=other_account["auth"]), 404)

    async def test_put_on_other_users_note_is_forbidden(self, client, user_account, other_account):
        location = (
            await client.post("/notes", json={"title": "mine"}, auth=user_account["auth"])
        ).headers["Location"]

        resp = await client.put(location, json={"title": "theirs"}, auth=other_account["auth"])

        assert_error(resp, 403, "Access denied")
        assert (await client.get(location, auth=user_account["auth"])).json()["title"] == "mine"

    async def test_notes_require_authentication(self, client):
        assert_error(await client.get("/notes"), 401, "Unauthorized")
        assert_error(await client.post("/notes", json={"title": "x"}), 401)

    async def test_user_deletion_removes_notes(self, client, db_session, user_account, admin_account):
        auth = user_account["auth"]
        for i in range(3):
            await client.post("/notes", json={"title": f"n{i}"}, auth=auth)

        assert (await client.delete(f"/users/{user_account['id']}", auth=admin_account["auth"])).status_code == 204

        remaining = await db_session.scalar(select(func.count()).select_from(Note))
        assert remaining == 0
        assert_error(await client.get("/notes", auth=auth), 401)


@pytest.mark.asyncio
class TestNotesPaging:

    async def test_page_of_own_notes(self, client, user_account, other_account):
        for title in ("b", "c", "a"):
            await client.post("/notes", json={"title": title}, auth=user_account["auth"])
        await client.post("/notes", json={"title": "other"}, auth=other_account["auth"])

        resp = await client.get(
            "/notes", params={"page": 0, "size": 2, "sort": "title,desc"}, auth=user_account["auth"]
        )

        assert resp.status_code == 200
        page = resp.json()
        assert page["total_elements"] == 3
        assert page["total_pages"] == 2
        assert [n["title"] for n in page["content"]] == ["c", "b"]

    async def test_unknown_sort_property(self, client, user_account):
        resp = await client.get("/notes", params={"sort": "color,asc"}, auth=user_account["auth"])
        assert_error(resp, 400, "No property 'color' found")

    async def test_negative_page_is_rejected(self, client, user_account):
        assert_error(await client.get("/notes", params={"page": -1}, auth=user_account["auth"]), 400)


@pytest.mark.asyncio
class TestUnexpectedErrors:

    async def test_unexpected_failure_is_a_generic_500(self, client, user_account, audit_sink, monkeypatch):
        """
        Behavior:
            - A failure nobody classified answers 500 with the generic message
              and the common error body.
            - The exception reaches the audit sink.
        """
        async def broken_get(self, note_id, owner_id):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(NoteService, "get", broken_get)

        resp = await client.get("/notes/1", auth=user_account["auth"])

        assert_error(resp, 500, GENERIC_ERROR_MESSAGE)
        assert [type(e) for e in audit_sink.unhandled] == [RuntimeError]

    async def test_unknown_route_uses_error_shape(self, client):
        resp = await client.get("/nowhere")
        assert_error(resp, 404)
