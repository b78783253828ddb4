"""SSE 响应流的增量解码与逐行解析"""

import codecs
import json
import logging
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"


def split_line(buffer: str) -> Optional[Tuple[str, str]]:
    """
    在第一个换行符处切分缓冲区，返回 (line, rest)。

    没有完整的行时返回 None，调用方需等待更多数据。
    """
    index = buffer.find("\n")
    if index == -1:
        return None
    return buffer[:index], buffer[index + 1:]


def parse_record(line: str) -> Optional[Any]:
    """
    解析单条 SSE 记录，返回 JSON 值；空行或非 JSON 返回 None。
    """
    line = line.strip()
    if not line:
        return None
    if line.startswith(DATA_PREFIX):
        line = line[len(DATA_PREFIX):].strip()
    try:
        return json.loads(line)
    except ValueError:
        # 半截或格式错误的记录直接丢弃，不中断整个流
        logger.debug("Dropping malformed SSE record: %r", line[:200])
        return None


def is_falsy_json(value: Any) -> bool:
    # null, false, 0 and "" only; an empty object or array still counts
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def extract_content(record: Any) -> Optional[Any]:
    """只保留有值的 content：null、false、0 与空字符串和缺失一样丢弃"""
    if not isinstance(record, dict):
        return None
    content = record.get("content")
    return None if is_falsy_json(content) else content


class SSELineBuffer:
    """
    Incremental bytes -> lines state machine.

    State is the UTF-8 decoder's pending partial character plus the decoded
    text that has not yet been terminated by a newline.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """Decode ``chunk`` and return every line it completed, in order."""
        self._buffer += self._decoder.decode(chunk)
        lines = []
        while True:
            split = split_line(self._buffer)
            if split is None:
                break
            line, self._buffer = split
            lines.append(line)
        return lines
