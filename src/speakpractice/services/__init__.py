"""Practice services.

This package provides the text generation, translation and transcription
operations exposed by the HTTP layer.
"""

from speakpractice.services.text_generation import TextGenerationService
from speakpractice.services.transcription import TranscriptionService
from speakpractice.services.translation import TranslationService

__all__ = [
    "TextGenerationService",
    "TranslationService",
    "TranscriptionService",
]
