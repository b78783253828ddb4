"""聊天消息发送与 SSE 流式响应解析"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from pydantic import ValidationError

from carpulse.core.config import settings
from carpulse.core.errors import MessageValidationError, StreamingUnsupportedError
from carpulse.schemas import NewMessage, OutgoingMessage, RunPayload
from carpulse.services.http import raise_for_api_error
from carpulse.utils.sse import SSELineBuffer, extract_content, parse_record
from carpulse.utils.vehicle_id import build_state_delta

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "text/event-stream",
}


def validate_message(
    session_id: Optional[str],
    text: Optional[str] = None,
    inline_data: Optional[Dict[str, Any]] = None,
) -> OutgoingMessage:
    try:
        return OutgoingMessage(session_id=session_id or "", text=text, inline_data=inline_data)
    except ValidationError as e:
        first = e.errors()[0]
        reason = first.get("ctx", {}).get("error") or first["msg"]
        raise MessageValidationError(str(reason)) from e


def build_parts(message: OutgoingMessage) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    if message.has_text:
        parts.append({"text": message.text})
    if message.inline_data is not None:
        parts.append({"inlineData": message.inline_data})
    return parts


def ensure_streamable(response: httpx.Response) -> None:
    if not isinstance(response.stream, httpx.AsyncByteStream):
        raise StreamingUnsupportedError()


class StreamingMessageSender:
    """
    Sends one chat message to ``/run_sse`` and decodes the streamed reply.

    Every line of the response body is a JSON record, optionally prefixed
    with ``data:``. The ``content`` value of each record is collected in
    arrival order; malformed records and a trailing unterminated line are
    dropped.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        app_name: Optional[str] = None,
        user_id: Optional[str] = None,
        request_timeout: Optional[float] = None,
        stream_read_timeout: Optional[float] = None,
    ):
        self.http_client = http_client
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.app_name = app_name or settings.APP_NAME
        self.user_id = user_id or settings.USER_ID
        self.timeout = httpx.Timeout(
            request_timeout if request_timeout is not None else settings.REQUEST_TIMEOUT,
            read=stream_read_timeout if stream_read_timeout is not None else settings.STREAM_READ_TIMEOUT,
        )

    @property
    def run_sse_url(self) -> str:
        return f"{self.base_url}/run_sse"

    def build_payload(self, message: OutgoingMessage) -> Dict[str, Any]:
        payload = RunPayload(
            app_name=self.app_name,
            new_message=NewMessage(parts=build_parts(message)),
            session_id=message.session_id,
            state_delta=build_state_delta(message.text),
            user_id=self.user_id,
        )
        return payload.to_wire()

    async def iter_message_stream(
        self,
        session_id: Optional[str],
        text: Optional[str] = None,
        inline_data: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[Any]:
        """
        逐个产出 content 片段。

        参数校验在发起任何请求之前完成；请求失败抛出 APIError。
        """
        message = validate_message(session_id, text, inline_data)
        payload = self.build_payload(message)

        async with self.http_client.stream(
            "POST",
            self.run_sse_url,
            json=payload,
            headers=SSE_HEADERS,
            timeout=self.timeout,
        ) as response:
            await raise_for_api_error(response)
            ensure_streamable(response)

            buffer = SSELineBuffer()
            count = 0
            async for chunk in response.aiter_bytes():
                for line in buffer.feed(chunk):
                    content = extract_content(parse_record(line))
                    if content is None:
                        continue
                    count += 1
                    yield content

            if buffer.pending.strip():
                logger.debug("Discarding unterminated SSE line: %r", buffer.pending[:200])
            logger.info(
                "Session %s stream finished with %d fragments",
                message.session_id,
                count,
                extra={"session_id": message.session_id, "fragments": count},
            )

    async def send_message_stream(
        self,
        session_id: Optional[str],
        text: Optional[str] = None,
        inline_data: Optional[Dict[str, Any]] = None,
    ) -> List[Any]:
        return [
            content
            async for content in self.iter_message_stream(session_id, text=text, inline_data=inline_data)
        ]
