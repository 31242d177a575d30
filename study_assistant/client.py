import base64
import logging
import os
from typing import Any, Dict, List, Optional
import requests
from pydantic import ValidationError
from .models import ActionName, AnswerResult, ChatTurn, QuizQuestion, quiz_adapter
from .services.extractors import SUPPORTED_EXTENSIONS, file_extension, is_supported

logger = logging.getLogger("study_assistant")

DEFAULT_ENDPOINT = "/api/gemini-proxy"
NETWORK_ERROR = "Network error or proxy not found. Ensure the proxy endpoint is correct and the server is running."

class ProxyError(Exception):
    """The single failure type callers of ProxyClient ever see."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

class ProxyClient:
    def __init__(self, base_url: str = "", endpoint: str = DEFAULT_ENDPOINT, session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> None:
        self.url = base_url.rstrip("/") + endpoint
        self.session = session or requests.Session()
        self.timeout = timeout

    def _error_message(self, response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        if body is not None:
            return f"Proxy request failed with status {response.status_code}"
        return response.text or f"HTTP error! status: {response.status_code}"

    def call(self, action: ActionName, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.url,
                json={"action": action.value, "data": data},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.ConnectionError as e:
            logger.error({"event": "proxy_unreachable", "action": action.value, "error": str(e)})
            raise ProxyError(NETWORK_ERROR) from e
        except requests.RequestException as e:
            logger.error({"event": "proxy_transport_failed", "action": action.value, "error": str(e)})
            raise ProxyError(f"Proxy request failed: {e}") from e

        if not response.ok:
            message = self._error_message(response)
            logger.error({"event": "proxy_call_failed", "action": action.value, "status_code": response.status_code, "error": message})
            raise ProxyError(message, status_code=response.status_code)
        try:
            body = response.json()
        except ValueError as e:
            raise ProxyError("Proxy returned a response that is not valid JSON.", status_code=response.status_code) from e
        if not isinstance(body, dict):
            raise ProxyError("Proxy returned an unexpected response shape.", status_code=response.status_code)
        return body

    def extract_text_from_file(self, file_name: str, file_data: str) -> str:
        body = self.call(ActionName.EXTRACT_TEXT_FROM_FILE, {"fileName": file_name, "fileData": file_data})
        return self._require_str(body, "extractedText")

    def upload_file(self, path: str) -> str:
        """Read a local document and return the text the proxy extracts from it."""
        if not is_supported(path):
            raise ProxyError(f"Unsupported file type: {file_extension(os.path.basename(path))}. Supported: {', '.join(SUPPORTED_EXTENSIONS)}")
        try:
            with open(path, "rb") as f:
                encoded = base64.b64encode(f.read()).decode("ascii")
        except OSError as e:
            raise ProxyError(f"Error reading file: {e}") from e
        return self.extract_text_from_file(os.path.basename(path), encoded)

    def summarize_text(self, text: str) -> str:
        return self._require_str(self.call(ActionName.SUMMARIZE_TEXT, {"text": text}), "summary")

    def answer_question(self, context_text: str, question: str, chat_history: List[ChatTurn]) -> AnswerResult:
        body = self.call(ActionName.ANSWER_QUESTION, {
            "contextText": context_text,
            "question": question,
            "chatHistory": [turn.model_dump() for turn in chat_history],
        })
        try:
            return AnswerResult.model_validate(body)
        except ValidationError as e:
            raise ProxyError("Proxy returned an invalid answer format.") from e

    def generate_quiz(self, context_text: str) -> List[QuizQuestion]:
        body = self.call(ActionName.GENERATE_QUIZ, {"contextText": context_text})
        quiz = body.get("quiz")
        if not isinstance(quiz, list):
            logger.error({"event": "invalid_quiz_format", "body": body})
            raise ProxyError("Proxy returned an invalid quiz format.")
        try:
            return quiz_adapter.validate_python(quiz)
        except ValidationError as e:
            raise ProxyError("Proxy returned an invalid quiz format.") from e

    def create_notes(self, text: str, topic: Optional[str] = None) -> str:
        data: Dict[str, Any] = {"text": text}
        if topic:
            data["topic"] = topic
        return self._require_str(self.call(ActionName.CREATE_NOTES, data), "notes")

    def suggest_video_topics(self, text: str) -> List[str]:
        body = self.call(ActionName.SUGGEST_VIDEO_TOPICS, {"text": text})
        suggestions = body.get("suggestions")
        if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
            logger.error({"event": "invalid_video_suggestions_format", "body": body})
            raise ProxyError("Proxy returned an invalid format for video suggestions.")
        return suggestions

    def _require_str(self, body: Dict[str, Any], key: str) -> str:
        value = body.get(key)
        if not isinstance(value, str):
            raise ProxyError(f"Proxy returned an invalid response: missing {key}.")
        return value
