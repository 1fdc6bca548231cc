"""
AudioShelf API Client

Async HTTP client used by the player. Responses are parsed into the same
pydantic schemas the service emits; HTTP failures are mapped back onto the
domain error taxonomy.
"""
from typing import Optional

import httpx
from loguru import logger

from audioshelf.config import PLAYER_API_BASE_URL, PLAYER_REQUEST_TIMEOUT
from audioshelf.exceptions import (
    AudioShelfError,
    NotFoundError,
    UpstreamFailure,
    ValidationFailure,
)
from audioshelf.schemas import (
    BookResponse,
    PlayUrlResponse,
    ProgressResponse,
    ProgressUpdate,
)


class AudioShelfClient:
    """
    Thin async wrapper around the public AudioShelf endpoints.

    Error mapping:
        404          -> NotFoundError
        400 / 422    -> ValidationFailure
        5xx, network -> UpstreamFailure
    """

    def __init__(
        self,
        base_url: str = PLAYER_API_BASE_URL,
        timeout: float = PLAYER_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AudioShelfClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ==================== Catalogue ====================

    async def list_books(self, search: Optional[str] = None) -> list[BookResponse]:
        params = {"search": search} if search else None
        data = await self._request("GET", "/books", params=params)
        return [BookResponse.model_validate(item) for item in data]

    async def get_book(self, book_id: str) -> BookResponse:
        data = await self._request("GET", f"/books/{book_id}")
        return BookResponse.model_validate(data)

    # ==================== Playback ====================

    async def get_play_url(self, book_id: str, chapter_id: Optional[str] = None) -> PlayUrlResponse:
        body = {"chapterId": chapter_id} if chapter_id else {}
        data = await self._request("POST", f"/books/{book_id}/play-url", json=body)
        return PlayUrlResponse.model_validate(data)

    # ==================== Progress ====================

    async def get_progress(self, book_id: str, session_id: str) -> ProgressResponse:
        data = await self._request(
            "GET",
            f"/books/{book_id}/progress",
            params={"sessionId": session_id},
        )
        return ProgressResponse.model_validate(data)

    async def save_progress(self, book_id: str, update: ProgressUpdate) -> ProgressResponse:
        data = await self._request(
            "POST",
            f"/books/{book_id}/progress",
            json=update.model_dump(by_alias=True),
        )
        return ProgressResponse.model_validate(data)

    # ==================== Transport ====================

    async def _request(self, method: str, path: str, **kwargs):
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise UpstreamFailure(f"Request failed: {e}") from e

        if response.is_success:
            return response.json()

        detail = _error_detail(response)
        if response.status_code == 404:
            raise NotFoundError(detail)
        if response.status_code in (400, 422):
            raise ValidationFailure(detail)
        if response.status_code >= 500:
            raise UpstreamFailure(detail)
        raise AudioShelfError(detail)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"HTTP {response.status_code}"
