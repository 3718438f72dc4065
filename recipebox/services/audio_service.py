"""Audio upload validation."""

from typing import Optional, Tuple

from recipebox.config import settings
from recipebox.utils.exceptions import ValidationError

# Browsers record voice notes as webm/ogg/mp4 containers
_CONTAINER_AUDIO_TYPES = {"video/webm": "audio/webm", "video/mp4": "audio/mp4", "video/ogg": "audio/ogg"}


class AudioService:
    """Checks uploaded voice recordings before transcription."""

    @staticmethod
    def validate_audio(file_content: bytes, content_type: Optional[str]) -> Tuple[bytes, str]:
        if not file_content:
            raise ValidationError("Audio file is empty")

        if len(file_content) > settings.max_audio_size:
            raise ValidationError(
                f"Audio file too large (max {settings.max_audio_size / 1024 / 1024:.0f}MB)"
            )

        # "audio/webm;codecs=opus" -> "audio/webm"
        mime_type = (content_type or "").split(";")[0].strip().lower()
        mime_type = _CONTAINER_AUDIO_TYPES.get(mime_type, mime_type)
        if not mime_type.startswith("audio/"):
            raise ValidationError(f"Unsupported audio format: {content_type or 'unknown'}")

        return file_content, mime_type
