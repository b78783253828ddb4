"""carpulse 日志配置：只接管 carpulse 命名空间，不改动调用方的 root logger。"""

import json
import logging
import sys
from typing import Any, Optional, TextIO, Union

LOGGER_NAMESPACE = "carpulse"

# extra={...} 中会被原样写入 JSON 的字段
EXTRA_FIELDS = ("session_id", "status_code", "fragments")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log[field] = value
        if record.exc_info:
            log["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    给 ``carpulse`` logger 安装一个 JSON handler 并返回该 logger。

    重复调用会替换之前的 handler；日志不再向 root 传播，避免重复输出。
    """
    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger
