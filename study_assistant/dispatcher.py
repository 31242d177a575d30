import base64
import logging
from typing import Any, Dict, Optional, assert_never
from pydantic import BaseModel, ValidationError
from .models import (
    ActionName,
    ActionResult,
    AnswerQuestionRequest,
    AnswerResult,
    CreateNotesRequest,
    DispatchResult,
    ErrorResult,
    ExtractTextFromFileRequest,
    ExtractTextResult,
    GenerateQuizRequest,
    NotesResult,
    QuizResult,
    SuggestVideoTopicsRequest,
    SummarizeTextRequest,
    SummaryResult,
    VideoSuggestionsResult,
    action_request_adapter,
    quiz_adapter,
)
from .services.extractors import TextExtractor, UnsupportedFileType
from .services.gemini_client import LLMProvider
from .services.json_text import parse_json_from_text
from .services.prompt_builder import PromptBuilder

logger = logging.getLogger("study_assistant")

SERVICE_NOT_INITIALIZED = "AI Service Not Initialized. The API_KEY is likely missing on the server. Please check server logs."

MISSING_FIELD_MESSAGES: Dict[ActionName, str] = {
    ActionName.EXTRACT_TEXT_FROM_FILE: "Missing fileName or fileData for extraction.",
    ActionName.SUMMARIZE_TEXT: "Missing text for summarization.",
    ActionName.ANSWER_QUESTION: "Missing contextText, question, or chatHistory for Q&A.",
    ActionName.GENERATE_QUIZ: "Missing contextText for quiz generation.",
    ActionName.CREATE_NOTES: "Missing text for notes creation.",
    ActionName.SUGGEST_VIDEO_TOPICS: "Missing text for video suggestions.",
}

QUIZ_FORMAT_ERROR = (
    "The AI returned an unexpected format for the quiz. Please try again. "
    "If the problem persists, the content might be too complex for quiz generation in the required format."
)
VIDEO_FORMAT_ERROR = "The AI returned an unexpected format for video suggestions. Please try again."

class ActionError(Exception):
    """An action failed in a way that maps onto a specific HTTP status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)

def _error(status_code: int, message: str, details: Optional[str] = None) -> DispatchResult:
    body = ErrorResult(error=message, details=details).model_dump(by_alias=True, exclude_none=True)
    return DispatchResult(status_code=status_code, body=body)

def _decode_base64(data: str) -> bytes:
    # browsers sometimes drop the trailing padding
    return base64.b64decode(data + "=" * (-len(data) % 4))

def _ok(result: BaseModel) -> DispatchResult:
    return DispatchResult(status_code=200, body=result.model_dump(by_alias=True, exclude_none=True))

class ActionDispatcher:
    """Runs exactly one action per request and never raises.

    The LLM provider is injected; ``None`` means no credential was configured
    at startup, in which case every action except file extraction answers 503.
    """

    def __init__(self, llm: Optional[LLMProvider], extractor: Optional[TextExtractor] = None) -> None:
        self.llm = llm
        self.extractor = extractor or TextExtractor()
        self.prompts = PromptBuilder()

    @property
    def llm_configured(self) -> bool:
        return self.llm is not None

    def dispatch(self, payload: Any) -> DispatchResult:
        if not isinstance(payload, dict) or not isinstance(payload.get("action"), str):
            return _error(400, "Bad Request: body must be an object with a string 'action'.")
        action = payload["action"]
        if self.llm is None and action != ActionName.EXTRACT_TEXT_FROM_FILE.value:
            logger.warning({"event": "llm_not_configured", "action": action})
            return _error(503, SERVICE_NOT_INITIALIZED)
        try:
            action_name = ActionName(action)
        except ValueError:
            return _error(400, f"Invalid action: {action}")
        try:
            request = action_request_adapter.validate_python(payload)
        except ValidationError as e:
            logger.debug({"event": "request_invalid", "action": action, "errors": e.errors(include_url=False)})
            return _error(400, MISSING_FIELD_MESSAGES[action_name])

        logger.debug({"event": "dispatch", "action": action})
        try:
            return _ok(self._run(request))
        except ActionError as e:
            logger.error({"event": "action_failed", "action": action, "status_code": e.status_code, "error": e.message})
            return _error(e.status_code, e.message)
        except Exception as e:
            logger.exception("action_failed", extra={"action": action})
            return _error(500, str(e) or "An unknown error occurred on the server.", details=f"{type(e).__name__}: {e}")

    def _run(self, request: Any) -> ActionResult:
        match request:
            case ExtractTextFromFileRequest():
                return self.extract_text_from_file(request)
            case SummarizeTextRequest():
                return self.summarize_text(request)
            case AnswerQuestionRequest():
                return self.answer_question(request)
            case GenerateQuizRequest():
                return self.generate_quiz(request)
            case CreateNotesRequest():
                return self.create_notes(request)
            case SuggestVideoTopicsRequest():
                return self.suggest_video_topics(request)
            case _:
                assert_never(request)

    def _require_llm(self) -> LLMProvider:
        if self.llm is None:
            raise ActionError(503, SERVICE_NOT_INITIALIZED)
        return self.llm

    def extract_text_from_file(self, request: ExtractTextFromFileRequest) -> ExtractTextResult:
        file_name = request.data.file_name
        try:
            extract = self.extractor.extractor_for(file_name)
        except UnsupportedFileType as e:
            raise ActionError(400, str(e))
        try:
            text = extract(_decode_base64(request.data.file_data))
        except Exception as e:
            logger.exception("extraction_failed", extra={"file_name": file_name})
            raise ActionError(500, f"Failed to extract text from file: {e}")
        logger.debug({"event": "extracted_text", "file_name": file_name, "chars": len(text)})
        return ExtractTextResult(extracted_text=text.strip())

    def summarize_text(self, request: SummarizeTextRequest) -> SummaryResult:
        completion = self._require_llm().generate(self.prompts.summary(request.data.text))
        return SummaryResult(summary=completion.text)

    def answer_question(self, request: AnswerQuestionRequest) -> AnswerResult:
        data = request.data
        contents = [turn.model_dump() for turn in data.chat_history]
        contents.append({"role": "user", "parts": [{"text": data.question}]})
        completion = self._require_llm().generate(
            contents,
            system_instruction=self.prompts.qna_system_instruction(data.context_text),
        )
        return AnswerResult(text=completion.text, grounding_metadata=completion.grounding_metadata)

    def generate_quiz(self, request: GenerateQuizRequest) -> QuizResult:
        completion = self._require_llm().generate(self.prompts.quiz(request.data.context_text), json_output=True)
        parsed = parse_json_from_text(completion.text)
        if not isinstance(parsed, list):
            logger.error({"event": "quiz_format_invalid", "raw": completion.text[:500]})
            raise ValueError(QUIZ_FORMAT_ERROR)
        try:
            quiz = quiz_adapter.validate_python(parsed)
        except ValidationError:
            logger.error({"event": "quiz_format_invalid", "raw": completion.text[:500]})
            raise ValueError(QUIZ_FORMAT_ERROR)
        return QuizResult(quiz=quiz)

    def create_notes(self, request: CreateNotesRequest) -> NotesResult:
        prompt = self.prompts.notes(request.data.text, request.data.topic)
        completion = self._require_llm().generate(prompt)
        return NotesResult(notes=completion.text)

    def suggest_video_topics(self, request: SuggestVideoTopicsRequest) -> VideoSuggestionsResult:
        completion = self._require_llm().generate(self.prompts.video_topics(request.data.text), json_output=True)
        parsed = parse_json_from_text(completion.text)
        if not isinstance(parsed, list) or not all(isinstance(s, str) for s in parsed):
            logger.error({"event": "video_format_invalid", "raw": completion.text[:500]})
            raise ValueError(VIDEO_FORMAT_ERROR)
        return VideoSuggestionsResult(suggestions=parsed)
