from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from carpulse.core.config import Settings, get_settings
from carpulse.services import FileUploader, SessionClient, StreamingMessageSender
from carpulse.services.file_uploader import FileInput


class CarPulseClient:
    """
    CarPulse 后端客户端，组合会话、文件上传与流式消息三个服务。

    未注入 http_client 时自行创建 httpx.AsyncClient，并在 aclose() 时关闭；
    注入的 client 由调用方负责关闭。
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        app_name: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        settings = settings or get_settings()
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT)

        base_url = base_url or settings.BASE_URL
        app_name = app_name or settings.APP_NAME
        user_id = user_id or settings.USER_ID

        self.sessions = SessionClient(self.http_client, base_url=base_url, app_name=app_name, user_id=user_id)
        self.files = FileUploader(self.http_client, base_url=base_url, process_path=settings.FILE_PROCESS_PATH)
        self.messages = StreamingMessageSender(
            self.http_client,
            base_url=base_url,
            app_name=app_name,
            user_id=user_id,
            request_timeout=settings.REQUEST_TIMEOUT,
            stream_read_timeout=settings.STREAM_READ_TIMEOUT,
        )

    async def __aenter__(self) -> "CarPulseClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    # --- Sessions ---

    async def list_sessions(self) -> List[Any]:
        return await self.sessions.list_sessions()

    async def create_session(self) -> Optional[Dict[str, Any]]:
        return await self.sessions.create_session()

    async def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return await self.sessions.get_session(session_id)

    async def delete_session(self, session_id: str) -> None:
        await self.sessions.delete_session(session_id)

    # --- Files ---

    async def upload_file(
        self,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Optional[Any]:
        return await self.files.upload_file(file, filename=filename, content_type=content_type)

    # --- Messages ---

    async def send_message_stream(
        self,
        session_id: Optional[str],
        text: Optional[str] = None,
        inline_data: Optional[Dict[str, Any]] = None,
    ) -> List[Any]:
        return await self.messages.send_message_stream(session_id, text=text, inline_data=inline_data)

    def iter_message_stream(
        self,
        session_id: Optional[str],
        text: Optional[str] = None,
        inline_data: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[Any]:
        return self.messages.iter_message_stream(session_id, text=text, inline_data=inline_data)
