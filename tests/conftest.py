from typing import Any, Dict, List, Optional
import pytest
from fastapi.testclient import TestClient
from study_assistant.dispatcher import ActionDispatcher
from study_assistant.main import app, get_dispatcher
from study_assistant.services.gemini_client import Completion

class FakeLLM:
    """Returns queued completions and records what it was asked."""

    def __init__(self, *texts: str, grounding_metadata: Optional[Dict[str, Any]] = None) -> None:
        self.texts = list(texts)
        self.grounding_metadata = grounding_metadata
        self.calls: List[Dict[str, Any]] = []

    def generate(self, contents, *, system_instruction=None, json_output=False) -> Completion:
        self.calls.append({"contents": contents, "system_instruction": system_instruction, "json_output": json_output})
        text = self.texts.pop(0) if self.texts else "ok"
        if isinstance(text, Exception):
            raise text
        return Completion(text=text, grounding_metadata=self.grounding_metadata)

@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()

@pytest.fixture
def dispatcher(fake_llm) -> ActionDispatcher:
    return ActionDispatcher(llm=fake_llm)

@pytest.fixture
def api(dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
