"""
HTTP implementation of the note persistence contract.
Talks to the NoteFlow REST API with a bearer token.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from noteflow.editor.persistence import NotePersistence, PersistenceError
from noteflow.models.note import NoteCreate, NoteResponse, NoteUpdate
from noteflow.models.scratch_pad import ScratchPadResponse

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Pull the API's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        # Request validation errors come back as a list of problems
        return "; ".join(
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in detail
        )
    return response.text or f"HTTP {response.status_code}"


class HttpNotePersistence(NotePersistence):
    """
    NoteFlow REST API client.

    Args:
        base_url: API root, e.g. ``http://localhost:8000/api``.
        token: JWT access token from /auth/login.
        timeout: Per-request timeout in seconds.
        client: Optional shared httpx.AsyncClient; when omitted a client
            is opened per request.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = client

    def _get_headers(self) -> Dict[str, str]:
        """Build request headers with authentication."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json"
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, headers=self._get_headers(), **kwargs
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method, url, headers=self._get_headers(), **kwargs
                    )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise PersistenceError(f"Could not reach the server: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.debug(f"{method} {url} rejected with {response.status_code}: {detail}")
            raise PersistenceError(detail, status_code=response.status_code)
        return response

    # ============================================================
    # Notes
    # ============================================================
    async def create_note(self, draft: NoteCreate) -> NoteResponse:
        response = await self._request("POST", "/notes", json=draft.model_dump())
        return NoteResponse(**response.json())

    async def update_note(self, note_id: str, changes: NoteUpdate) -> NoteResponse:
        response = await self._request(
            "PATCH", f"/notes/{note_id}", json=changes.model_dump(exclude_unset=True)
        )
        return NoteResponse(**response.json())

    async def get_note(self, note_id: str) -> NoteResponse:
        response = await self._request("GET", f"/notes/{note_id}")
        return NoteResponse(**response.json())

    async def list_notes(self, trashed: bool = False) -> List[NoteResponse]:
        response = await self._request(
            "GET", "/notes", params={"trashed": "true" if trashed else "false"}
        )
        return [NoteResponse(**item) for item in response.json()]

    async def trash_note(self, note_id: str) -> NoteResponse:
        response = await self._request("POST", f"/notes/{note_id}/trash")
        return NoteResponse(**response.json())

    async def restore_note(self, note_id: str) -> NoteResponse:
        response = await self._request("POST", f"/notes/{note_id}/restore")
        return NoteResponse(**response.json())

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{note_id}")

    # ============================================================
    # Scratch pad
    # ============================================================
    async def get_scratch_pad(self) -> ScratchPadResponse:
        response = await self._request("GET", "/scratch-pad")
        return ScratchPadResponse(**response.json())

    async def put_scratch_pad(self, content: str) -> ScratchPadResponse:
        response = await self._request("PUT", "/scratch-pad", json={"content": content})
        return ScratchPadResponse(**response.json())
