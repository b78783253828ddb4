"""共享的响应处理工具函数"""

import logging
from typing import Any, Optional

import httpx

from carpulse.core.errors import APIError

logger = logging.getLogger(__name__)


def safe_json(response: httpx.Response) -> Optional[Any]:
    """
    安全解析 JSON，不抛异常。

    204、空响应体或非 JSON 内容均返回 None。
    """
    if response.status_code == 204:
        return None
    try:
        return response.json()
    except ValueError:
        return None


async def read_error_text(response: httpx.Response) -> str:
    """Best-effort read of an error body; any read failure yields ''."""
    try:
        await response.aread()
        return response.text
    except (httpx.HTTPError, httpx.StreamError):
        return ""


async def raise_for_api_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    text = await read_error_text(response)
    logger.warning(
        "%s %s failed with HTTP %s", response.request.method, response.request.url, response.status_code
    )
    raise APIError(response.status_code, text)
