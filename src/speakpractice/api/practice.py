"""Practice routes: transcription, text generation and translation.

Every handler validates its input first, then calls exactly one service
operation, then wraps the result in the success envelope. Failures are
raised and rendered by the application's exception handlers.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from speakpractice.api.rate_limit import enforce_upload_limit
from speakpractice.constants import MAX_AUDIO_FILE_SIZE
from speakpractice.logger import get_logger
from speakpractice.schemas.envelope import success_payload
from speakpractice.schemas.practice import AudioUpload, TranscriptionInput
from speakpractice.schemas.requests import (
    CompletionBody,
    ConversationBody,
    ExercisesBody,
    ExplainBody,
    MessagesBody,
    SingleInputBody,
    SuggestionsBody,
    TextBody,
    TopicBody,
    TranslateBody,
)
from speakpractice.services import (
    TextGenerationService,
    TranscriptionService,
    TranslationService,
)
from speakpractice.validation import (
    validate_analysis,
    validate_completion,
    validate_conversation,
    validate_correction,
    validate_exercises,
    validate_explain,
    validate_messages,
    validate_single_input,
    validate_suggestions,
    validate_topic,
    validate_transcription,
    validate_translation,
)

logger = get_logger(__name__)

router = APIRouter()


def get_text_service(request: Request) -> TextGenerationService:
    return request.app.state.text_service


def get_translation_service(request: Request) -> TranslationService:
    return request.app.state.translation_service


def get_transcription_service(request: Request) -> TranscriptionService:
    return request.app.state.transcription_service


async def _read_upload(audio: UploadFile | None) -> AudioUpload | None:
    if audio is None:
        return None
    # One byte past the ceiling is enough to reject an oversized file.
    data = await audio.read(MAX_AUDIO_FILE_SIZE + 1)
    return AudioUpload(
        filename=audio.filename or "",
        content_type=audio.content_type,
        data=data,
    )


async def _transcription_input(
    audio: UploadFile | None,
    language: str | None,
    prompt: str | None,
    temperature: str | None,
) -> TranscriptionInput:
    upload = await _read_upload(audio)
    return validate_transcription(upload, language, prompt, temperature).unwrap()


# ============ Transcription ============


@router.post("/transcribe", dependencies=[Depends(enforce_upload_limit)])
async def transcribe_audio(
    audio: UploadFile | None = File(None),
    language: str | None = Form(None),
    prompt: str | None = Form(None),
    temperature: str | None = Form(None),
    service: TranscriptionService = Depends(get_transcription_service),
) -> dict[str, Any]:
    """Transcribe an uploaded audio file."""
    validated = await _transcription_input(audio, language, prompt, temperature)
    result = await service.transcribe(validated.upload, validated.options)
    return success_payload(result, "Audio transcribed successfully")


@router.post("/transcribe/detailed", dependencies=[Depends(enforce_upload_limit)])
async def transcribe_audio_detailed(
    audio: UploadFile | None = File(None),
    language: str | None = Form(None),
    prompt: str | None = Form(None),
    temperature: str | None = Form(None),
    service: TranscriptionService = Depends(get_transcription_service),
) -> dict[str, Any]:
    """Transcribe an uploaded audio file with word and segment timestamps."""
    validated = await _transcription_input(audio, language, prompt, temperature)
    result = await service.transcribe(validated.upload, validated.options, detailed=True)
    return success_payload(result, "Audio transcribed with timestamps successfully")


@router.get("/transcribe/formats")
async def supported_formats(
    service: TranscriptionService = Depends(get_transcription_service),
) -> dict[str, Any]:
    """List accepted audio formats and the upload size ceiling."""
    return success_payload(
        service.supported_formats(), "Supported formats retrieved successfully"
    )


# ============ Text generation ============


@router.post("/generate/text")
async def generate_text(
    body: MessagesBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    messages = validate_messages(body.messages).unwrap()
    result = await service.generate_text(messages, body.options)
    return success_payload(result, "Text generated successfully")


@router.post("/generate/completion")
async def generate_completion(
    body: CompletionBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_completion(body.prompt, body.system_prompt).unwrap()
    result = await service.generate_completion(
        validated.prompt, validated.system_prompt, body.options
    )
    return success_payload(result, "Completion generated successfully")


@router.post("/generate/single")
async def generate_single(
    body: SingleInputBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    prompt = validate_single_input(body.prompt).unwrap()
    result = await service.generate_single(prompt, body.options)
    return success_payload(result, "Text generated successfully")


@router.post("/generate/analyze")
async def analyze_text(
    body: TextBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    text = validate_analysis(body.text).unwrap()
    result = await service.analyze_text(text, body.options)
    return success_payload(result, "Text analyzed successfully")


@router.post("/generate/correct")
async def correct_grammar(
    body: TextBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    text = validate_correction(body.text).unwrap()
    result = await service.correct_grammar(text, body.options)
    return success_payload(result, "Grammar corrected successfully")


@router.post("/generate/exercises")
async def generate_exercises(
    body: ExercisesBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_exercises(body.error_type, body.difficulty, body.count).unwrap()
    result = await service.generate_exercises(
        validated.error_type, validated.difficulty, validated.count, body.options
    )
    return success_payload(result, "Exercises generated successfully")


@router.post("/generate/conversation")
async def generate_conversation(
    body: ConversationBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_conversation(body.message, body.history).unwrap()
    result = await service.generate_conversation_response(
        validated.message, validated.history, body.options
    )
    return success_payload(result, "Conversation response generated successfully")


@router.post("/generate/explain")
async def explain_concept(
    body: ExplainBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_explain(body.concept, body.level).unwrap()
    result = await service.explain_concept(validated.concept, validated.level, body.options)
    return success_payload(result, "Concept explained successfully")


@router.post("/generate/topic")
async def talk_with_specific_topic(
    body: TopicBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_topic(body.topic, body.initial_message).unwrap()
    result = await service.talk_with_specific_topic(
        validated.topic, validated.initial_message, body.options
    )
    return success_payload(result, "Topic conversation generated successfully")


@router.post("/generate/suggestions")
async def generate_suggestions(
    body: SuggestionsBody,
    service: TextGenerationService = Depends(get_text_service),
) -> dict[str, Any]:
    validated = validate_suggestions(body.topic, body.conversation_history).unwrap()
    result = await service.generate_response_suggestions(
        validated.topic, validated.conversation_history, body.options
    )
    return success_payload(result, "Response suggestions generated successfully")


# ============ Translation ============


@router.post("/translate")
async def translate_text(
    body: TranslateBody,
    service: TranslationService = Depends(get_translation_service),
) -> dict[str, Any]:
    validated = validate_translation(body.text, body.target_language).unwrap()
    result = await service.translate(validated.text, validated.target_language)
    return success_payload(result, "Text translated successfully")
