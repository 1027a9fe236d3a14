"""
Tests for notebooks, tags, tasks, the scratch pad and search.
"""

import pytest

from noteflow.models.notebook import DEFAULT_NOTEBOOK_COLOR
from noteflow.utils.validators import (
    NOTEBOOK_NAME_MAX_LENGTH,
    SCRATCH_PAD_MAX_LENGTH,
    SEARCH_QUERY_MAX_LENGTH,
)


async def create_note(client, headers, **fields) -> dict:
    response = await client.post("/api/notes", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestNotebooks:
    """Test notebook CRUD."""

    async def test_create_with_color(self, client, auth_headers):
        response = await client.post(
            "/api/notebooks", json={"name": "Work", "color": "#FF0000"}, headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["color"] == "#FF0000"

    async def test_invalid_color_falls_back(self, client, auth_headers):
        response = await client.post(
            "/api/notebooks", json={"name": "Work", "color": "red"}, headers=auth_headers
        )

        assert response.json()["color"] == DEFAULT_NOTEBOOK_COLOR

    async def test_invalid_color_on_update_rejected(self, client, auth_headers):
        notebook = (await client.post(
            "/api/notebooks", json={"name": "Work"}, headers=auth_headers
        )).json()

        response = await client.patch(
            f"/api/notebooks/{notebook['id']}", json={"color": "nope"}, headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.parametrize("name", ["", "   ", "x" * (NOTEBOOK_NAME_MAX_LENGTH + 1)])
    async def test_bad_names_rejected(self, client, auth_headers, name):
        response = await client.post(
            "/api/notebooks", json={"name": name}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_list_sorted_with_counts(self, client, auth_headers):
        work = (await client.post(
            "/api/notebooks", json={"name": "Work"}, headers=auth_headers
        )).json()
        await client.post("/api/notebooks", json={"name": "Home"}, headers=auth_headers)
        await create_note(client, auth_headers, notebook_id=work["id"])
        trashed = await create_note(client, auth_headers, notebook_id=work["id"])
        await client.post(f"/api/notes/{trashed['id']}/trash", headers=auth_headers)

        notebooks = (await client.get("/api/notebooks", headers=auth_headers)).json()

        assert [nb["name"] for nb in notebooks] == ["Home", "Work"]
        assert notebooks[1]["note_count"] == 1

    async def test_delete_unlinks_notes(self, client, auth_headers):
        notebook = (await client.post(
            "/api/notebooks", json={"name": "Work"}, headers=auth_headers
        )).json()
        note = await create_note(client, auth_headers, notebook_id=notebook["id"])

        response = await client.delete(f"/api/notebooks/{notebook['id']}", headers=auth_headers)
        assert response.status_code == 200

        kept = (await client.get(f"/api/notes/{note['id']}", headers=auth_headers)).json()
        assert kept["notebook_id"] is None

    async def test_other_users_notebook(self, client, auth_headers, other_headers):
        notebook = (await client.post(
            "/api/notebooks", json={"name": "Work"}, headers=auth_headers
        )).json()

        response = await client.delete(f"/api/notebooks/{notebook['id']}", headers=other_headers)

        assert response.status_code == 404


class TestTags:
    """Test tag CRUD."""

    async def test_note_count(self, client, auth_headers):
        tag = (await client.post("/api/tags", json={"name": "idea"}, headers=auth_headers)).json()
        await create_note(client, auth_headers, tag_ids=[tag["id"]])
        await create_note(client, auth_headers, tag_ids=[tag["id"]])
        await create_note(client, auth_headers)

        tags = (await client.get("/api/tags", headers=auth_headers)).json()

        assert tags[0]["note_count"] == 2

    async def test_delete_removes_tag_from_notes(self, client, auth_headers):
        keep = (await client.post("/api/tags", json={"name": "keep"}, headers=auth_headers)).json()
        drop = (await client.post("/api/tags", json={"name": "drop"}, headers=auth_headers)).json()
        note = await create_note(client, auth_headers, tag_ids=[keep["id"], drop["id"]])

        await client.delete(f"/api/tags/{drop['id']}", headers=auth_headers)

        updated = (await client.get(f"/api/notes/{note['id']}", headers=auth_headers)).json()
        assert updated["tag_ids"] == [keep["id"]]

    async def test_delete_missing_tag(self, client, auth_headers):
        response = await client.delete("/api/tags/missing", headers=auth_headers)

        assert response.status_code == 404


class TestTasks:
    """Test task CRUD."""

    async def test_open_tasks_first(self, client, auth_headers):
        done = (await client.post(
            "/api/tasks", json={"title": "Done"}, headers=auth_headers
        )).json()
        await client.post("/api/tasks", json={"title": "Open"}, headers=auth_headers)
        await client.patch(
            f"/api/tasks/{done['id']}", json={"is_completed": True}, headers=auth_headers
        )

        tasks = (await client.get("/api/tasks", headers=auth_headers)).json()

        assert [t["title"] for t in tasks] == ["Open", "Done"]

    async def test_foreign_note_link_rejected(self, client, auth_headers, other_headers):
        note = await create_note(client, other_headers)

        response = await client.post(
            "/api/tasks", json={"title": "Sneaky", "note_id": note["id"]}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_empty_title_rejected(self, client, auth_headers):
        response = await client.post("/api/tasks", json={"title": "  "}, headers=auth_headers)

        assert response.status_code == 400

    async def test_update_missing_task(self, client, auth_headers):
        response = await client.patch(
            "/api/tasks/missing", json={"title": "x"}, headers=auth_headers
        )

        assert response.status_code == 404

    async def test_delete(self, client, auth_headers):
        task = (await client.post(
            "/api/tasks", json={"title": "Temp"}, headers=auth_headers
        )).json()

        response = await client.delete(f"/api/tasks/{task['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert (await client.get("/api/tasks", headers=auth_headers)).json() == []


class TestScratchPad:
    """Test the per-user scratch pad."""

    async def test_empty_before_first_write(self, client, auth_headers):
        response = await client.get("/api/scratch-pad", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["content"] == ""

    async def test_put_then_get(self, client, auth_headers):
        await client.put("/api/scratch-pad", json={"content": "first"}, headers=auth_headers)
        await client.put("/api/scratch-pad", json={"content": "second"}, headers=auth_headers)

        response = await client.get("/api/scratch-pad", headers=auth_headers)

        assert response.json()["content"] == "second"

    async def test_pads_are_per_user(self, client, auth_headers, other_headers):
        await client.put("/api/scratch-pad", json={"content": "mine"}, headers=auth_headers)

        response = await client.get("/api/scratch-pad", headers=other_headers)

        assert response.json()["content"] == ""

    async def test_too_long(self, client, auth_headers):
        response = await client.put(
            "/api/scratch-pad",
            json={"content": "x" * (SCRATCH_PAD_MAX_LENGTH + 1)},
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestSearch:
    """Test note search."""

    async def test_matches_title_and_text(self, client, auth_headers):
        await create_note(client, auth_headers, title="Groceries", plain_text="milk, eggs")
        await create_note(client, auth_headers, title="Shopping", plain_text="buy MILK")
        await create_note(client, auth_headers, title="Other", plain_text="nothing")

        response = await client.get("/api/search", params={"q": "milk"}, headers=auth_headers)

        assert sorted(n["title"] for n in response.json()) == ["Groceries", "Shopping"]

    async def test_trashed_notes_excluded(self, client, auth_headers):
        note = await create_note(client, auth_headers, title="Secret plan")
        await client.post(f"/api/notes/{note['id']}/trash", headers=auth_headers)

        response = await client.get("/api/search", params={"q": "secret"}, headers=auth_headers)

        assert response.json() == []

    async def test_wildcards_are_literal(self, client, auth_headers):
        await create_note(client, auth_headers, title="100% done")
        await create_note(client, auth_headers, title="100 done")

        response = await client.get("/api/search", params={"q": "0%"}, headers=auth_headers)

        assert [n["title"] for n in response.json()] == ["100% done"]

    async def test_other_users_notes_excluded(self, client, auth_headers, other_headers):
        await create_note(client, other_headers, title="Bob's notes")

        response = await client.get("/api/search", params={"q": "notes"}, headers=auth_headers)

        assert response.json() == []

    @pytest.mark.parametrize("q", ["", "x" * (SEARCH_QUERY_MAX_LENGTH + 1)])
    async def test_empty_or_overlong_query(self, client, auth_headers, q):
        await create_note(client, auth_headers, title="x")

        response = await client.get("/api/search", params={"q": q}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == []
