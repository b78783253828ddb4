"""Service layer modules."""

from carpulse.services.file_uploader import FileUploader
from carpulse.services.message_stream import StreamingMessageSender
from carpulse.services.session_client import SessionClient

__all__ = ["FileUploader", "SessionClient", "StreamingMessageSender"]
