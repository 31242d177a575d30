import logging
from time import perf_counter
from typing import Any, Dict, List, Optional, Protocol, Union
import google.generativeai as genai
from pydantic import BaseModel
from ..config import Settings

logger = logging.getLogger("study_assistant")

Contents = Union[str, List[Dict[str, Any]]]

class Completion(BaseModel):
    text: str
    grounding_metadata: Optional[Dict[str, Any]] = None

class LLMProvider(Protocol):
    def generate(self, contents: Contents, *, system_instruction: Optional[str] = None, json_output: bool = False) -> Completion:
        ...

class GeminiClient:
    """Thin wrapper over google-generativeai used by the action dispatcher."""

    def __init__(self, api_key: str, model_name: str) -> None:
        genai.configure(api_key=api_key)
        self.model_name = model_name

    def _generation_config(self, json_output: bool) -> Dict[str, Any]:
        if json_output:
            return {"response_mime_type": "application/json"}
        return {}

    def _response_text(self, response: Any) -> str:
        try:
            return response.text or ""
        except ValueError:
            # .text raises when the first candidate has no simple text part
            pass
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return ""
        parts = candidates[0].content.parts
        return "".join(getattr(p, "text", "") for p in parts)

    def _grounding_metadata(self, response: Any) -> Optional[Dict[str, Any]]:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return None
        meta = getattr(candidates[0], "grounding_metadata", None)
        if not meta:
            return None
        try:
            data = type(meta).to_dict(meta, preserving_proto_field_name=False)
        except (AttributeError, TypeError):
            logger.debug({"event": "grounding_metadata_unconvertible", "type": type(meta).__name__})
            return None
        return data or None

    def generate(self, contents: Contents, *, system_instruction: Optional[str] = None, json_output: bool = False) -> Completion:
        model = genai.GenerativeModel(
            self.model_name,
            generation_config=self._generation_config(json_output),
            system_instruction=system_instruction,
        )
        logger.debug({"event": "gemini_request", "model": self.model_name, "json_output": json_output})
        t0 = perf_counter()
        response = model.generate_content(contents)
        latency_ms = int((perf_counter() - t0) * 1000)
        text = self._response_text(response)
        logger.debug({"event": "gemini_response", "preview": text[:200], "latency_ms": latency_ms})
        return Completion(text=text, grounding_metadata=self._grounding_metadata(response))

def build_llm(settings: Settings) -> Optional[GeminiClient]:
    if not settings.api_key:
        logger.error({
            "event": "gemini_no_api_key",
            "message": "API_KEY is not configured; AI actions will answer 503 until the process is restarted with it set.",
        })
        return None
    return GeminiClient(api_key=settings.api_key, model_name=settings.gemini_model)
