"""Speech-to-text for learner recordings."""

from speakpractice.constants import MAX_AUDIO_FILE_SIZE, SUPPORTED_AUDIO_FORMATS
from speakpractice.logger import get_logger
from speakpractice.providers.drivers import BaseProviderDriver
from speakpractice.schemas.practice import (
    AudioFormats,
    AudioUpload,
    TranscriptionOptions,
    TranscriptionResult,
)

logger = get_logger(__name__)


class TranscriptionService:
    """Transcribe validated audio uploads."""

    def __init__(self, driver: BaseProviderDriver):
        self._driver = driver

    async def transcribe(
        self,
        upload: AudioUpload,
        options: TranscriptionOptions | None = None,
        detailed: bool = False,
    ) -> TranscriptionResult:
        """Transcribe an upload, with word and segment timestamps if detailed.

        Args:
            upload: Audio that already passed the upload checks.
            options: Optional language, prompt and temperature hints.
            detailed: Request timing detail.

        Returns:
            Transcription result.
        """
        logger.info(
            "Transcribing audio: filename=%s, size=%d, content_type=%s, detailed=%s",
            upload.filename,
            upload.size,
            upload.content_type,
            detailed,
        )
        return await self._driver.transcribe(upload, options, detailed=detailed)

    @staticmethod
    def supported_formats() -> AudioFormats:
        """Return the accepted audio formats and the size ceiling."""
        return AudioFormats(
            formats=list(SUPPORTED_AUDIO_FORMATS),
            max_file_size=MAX_AUDIO_FILE_SIZE,
            max_file_size_mb=MAX_AUDIO_FILE_SIZE / (1024 * 1024),
        )
