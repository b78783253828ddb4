"""文件上传（服务日志处理）"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple, Union

import httpx

from carpulse.core.config import settings
from carpulse.services.http import raise_for_api_error, safe_json

logger = logging.getLogger(__name__)

FileInput = Union[str, Path, bytes, BinaryIO]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def build_file_field(
    file: FileInput,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> Tuple[str, bytes, str]:
    """
    把路径 / bytes / 文件对象统一转换为 httpx 的 (filename, content, content_type)。
    """
    if isinstance(file, (str, Path)):
        path = Path(file)
        content = path.read_bytes()
        filename = filename or path.name
    elif isinstance(file, bytes):
        content = file
    else:
        content = file.read()
        name = getattr(file, "name", None)
        if not filename and isinstance(name, str):
            filename = Path(name).name

    filename = filename or "upload"
    if content_type is None:
        content_type = mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE
    return filename, content, content_type


class FileUploader:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        process_path: Optional[str] = None,
    ):
        self.http_client = http_client
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.process_path = process_path or settings.FILE_PROCESS_PATH

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}{self.process_path}"

    async def upload_file(
        self,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Optional[Any]:
        """
        上传单个文件到处理接口，返回服务端解析结果（可能为 None）。

        非 2xx 响应抛出 APIError。
        """
        field = build_file_field(file, filename=filename, content_type=content_type)
        logger.debug("Uploading %s (%d bytes)", field[0], len(field[1]))

        response = await self.http_client.post(self.upload_url, files={"file": field})
        await raise_for_api_error(response)
        return safe_json(response)
