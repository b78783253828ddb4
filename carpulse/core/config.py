import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# 加载 .env 文件
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class Settings:
    # Backend
    # 默认指向线上 Render 部署，也可通过环境变量覆盖
    BASE_URL: str = os.getenv("CARPULSE_BASE_URL", "https://carpulse-backend-eo6t.onrender.com")
    APP_NAME: str = os.getenv("CARPULSE_APP_NAME", "agent")
    USER_ID: str = os.getenv("CARPULSE_USER_ID", "user")
    FILE_PROCESS_PATH: str = os.getenv(
        "CARPULSE_FILE_PROCESS_PATH", "/vehicle_service_logs/api/files/process-file"
    )

    # HTTP
    REQUEST_TIMEOUT: float = float(os.getenv("CARPULSE_REQUEST_TIMEOUT", "30"))
    # None 表示流式读取时不限制两个 chunk 之间的等待时间
    STREAM_READ_TIMEOUT: Optional[float] = _optional_float("CARPULSE_STREAM_READ_TIMEOUT")

    # Logging
    LOG_LEVEL: str = os.getenv("CARPULSE_LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.getenv("CARPULSE_LOG_JSON", "false").lower() == "true"


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
