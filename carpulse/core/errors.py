"""Exceptions raised by the CarPulse client."""


class CarPulseError(Exception):
    """Base class for every error the client raises."""


class APIError(CarPulseError):
    """
    后端返回非 2xx 状态码。

    消息优先使用服务端返回的文本，为空时退化为 ``HTTP <status>``。
    """

    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text
        super().__init__(text or f"HTTP {status_code}")


class MessageValidationError(CarPulseError, ValueError):
    """Outgoing message rejected before any request was sent."""


class StreamingUnsupportedError(CarPulseError):
    def __init__(self, message: str = "Streaming not supported by this transport."):
        super().__init__(message)
