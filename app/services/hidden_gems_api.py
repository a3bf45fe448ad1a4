"""Client to interact with the hidden gems backend (list + create routes)."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.errors import CreateFailed, ListFetchFailed

logger = logging.getLogger(__name__)


class HiddenGemsApiClient:
    """HTTP client wrapper for the hidden gems backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.hidden_gems_api_url).rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.hidden_gems_api_timeout)

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def list_gems(self) -> List[Dict[str, Any]]:
        """Fetch every persisted gem, most recent first."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/hidden-gems",
                headers=self._headers(),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ListFetchFailed(
                f"Hidden gems API error: {exc.response.status_code} - {exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise ListFetchFailed(f"Failed to reach hidden gems API: {exc}") from exc
        except ValueError as exc:
            raise ListFetchFailed(f"Invalid list response: {exc}") from exc

        gems = data.get("gems") if isinstance(data, dict) else None
        if gems is None:
            return []
        if not isinstance(gems, list):
            raise ListFetchFailed(f"Unexpected gems payload: {type(gems).__name__}")
        return gems

    async def create_gem(self, payload: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """Persist a new gem and return the stored record."""
        try:
            response = await self.http_client.post(
                f"{self.base_url}/hidden-gems",
                json=payload,
                headers=self._headers(token),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            raise CreateFailed(
                f"Hidden gems API error: {exc.response.status_code} - {exc.response.text}",
                user_message=message,
            ) from exc
        except httpx.RequestError as exc:
            raise CreateFailed(f"Failed to reach hidden gems API: {exc}") from exc
        except ValueError as exc:
            raise CreateFailed(f"Invalid create response: {exc}") from exc

        gem = data.get("gem") if isinstance(data, dict) else None
        if not isinstance(gem, dict):
            raise CreateFailed("Create response did not include the stored gem")
        return gem

    async def aclose(self) -> None:
        await self.http_client.aclose()


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull a user-facing message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


# Global instance
hidden_gems_api = HiddenGemsApiClient()
