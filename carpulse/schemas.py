import base64
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OutgoingMessage(BaseModel):
    session_id: str
    text: Optional[str] = None
    inline_data: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_not_empty(self) -> "OutgoingMessage":
        """session id 必填，且 text / inline_data 至少有一个"""
        if not self.session_id:
            raise ValueError("No active session id")
        if not self.has_text and self.inline_data is None:
            raise ValueError("Message empty")
        return self

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())


class InlineData(BaseModel):
    """Binary attachment sent alongside (or instead of) message text."""

    mime_type: str
    data: str  # base64

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "InlineData":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "InlineData":
        path = Path(path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls.from_bytes(path.read_bytes(), mime_type)

    def to_wire(self) -> Dict[str, str]:
        return {"mimeType": self.mime_type, "data": self.data}


# --- /run_sse request body ---

class NewMessage(BaseModel):
    role: Literal["user"] = "user"
    parts: List[Dict[str, Any]]


class RunPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_name: str = Field(alias="appName")
    new_message: NewMessage = Field(alias="newMessage")
    session_id: str = Field(alias="sessionId")
    state_delta: Optional[Dict[str, str]] = Field(default=None, alias="stateDelta")
    streaming: bool = False
    user_id: str = Field(alias="userId")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
