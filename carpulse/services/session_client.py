import logging
from typing import Any, Dict, List, Optional

import httpx

from carpulse.core.config import settings
from carpulse.services.http import raise_for_api_error, safe_json

logger = logging.getLogger(__name__)


class SessionClient:
    """
    Chat session CRUD against ``/apps/{app}/users/{user}/sessions``.

    ``list_sessions`` and ``get_session`` never raise: failures degrade to an
    empty list / None. ``create_session`` and ``delete_session`` raise
    ``APIError`` on a non-success response.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        app_name: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        self.http_client = http_client
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.app_name = app_name or settings.APP_NAME
        self.user_id = user_id or settings.USER_ID

    @property
    def sessions_url(self) -> str:
        return f"{self.base_url}/apps/{self.app_name}/users/{self.user_id}/sessions"

    def session_url(self, session_id: str) -> str:
        return f"{self.sessions_url}/{session_id}"

    async def list_sessions(self) -> List[Any]:
        try:
            response = await self.http_client.get(self.sessions_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # 后端休眠或网络问题，按“暂无会话”处理
            logger.warning("Listing sessions failed: %s", e)
            return []

        if not response.is_success:
            logger.warning(
                "Listing sessions returned HTTP %s",
                response.status_code,
                extra={"status_code": response.status_code},
            )
            return []

        sessions = safe_json(response)
        return sessions if sessions is not None else []

    async def create_session(self) -> Optional[Dict[str, Any]]:
        response = await self.http_client.post(
            self.sessions_url,
            content=b"{}",
            headers={"Content-Type": "application/json"},
        )
        await raise_for_api_error(response)
        session = safe_json(response)
        logger.debug("Created session %s", session.get("id") if isinstance(session, dict) else None)
        return session

    async def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self.http_client.get(self.session_url(session_id))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Fetching session %s failed: %s", session_id, e, extra={"session_id": session_id})
            return None

        if not response.is_success:
            return None
        return safe_json(response)

    async def delete_session(self, session_id: str) -> None:
        response = await self.http_client.delete(self.session_url(session_id))
        await raise_for_api_error(response)
