import pytest
from study_assistant.client import ProxyError
from study_assistant.models import AnswerResult, QuizQuestion
from study_assistant.state import GREETING, ChatSession, QuizPhase, QuizSession, QuizStateError, StudyWorkspace, video_search_url

def question(text: str, correct: str) -> QuizQuestion:
    return QuizQuestion(question=text, options=["A", "B", "C", "D"], correct_answer=correct)

class FakeClient:
    def __init__(self) -> None:
        self.quiz = [question("q1", "A"), question("q2", "B"), question("q3", "C")]
        self.error: ProxyError | None = None
        self.calls = []
        self.on_generate = None

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def generate_quiz(self, context_text):
        self.calls.append(("generate_quiz", context_text))
        if self.on_generate:
            self.on_generate()
        self._maybe_fail()
        return [q.model_copy() for q in self.quiz]

    def answer_question(self, context_text, question, chat_history):
        self.calls.append(("answer_question", question, chat_history))
        self._maybe_fail()
        return AnswerResult(text="answer to " + question)

    def summarize_text(self, text):
        self._maybe_fail()
        return "summary"

    def create_notes(self, text, topic=None):
        self.calls.append(("create_notes", topic))
        self._maybe_fail()
        return "notes"

    def suggest_video_topics(self, text):
        self._maybe_fail()
        return ["cells explained"]

    def upload_file(self, path):
        self._maybe_fail()
        return "uploaded text"

@pytest.fixture
def client():
    return FakeClient()

@pytest.fixture
def quiz(client):
    return QuizSession(client, context_text="cells")

def test_generate_initializes_empty_answers(quiz):
    quiz.generate()
    assert quiz.phase == QuizPhase.ACTIVE
    assert quiz.answers == ["", "", ""]
    assert quiz.current_index == 0
    assert quiz.score == 0
    assert all(q.user_answer is None for q in quiz.questions)

def test_scenario_two_of_three_correct(quiz):
    quiz.generate()
    for choice in ("A", "D", "C"):
        quiz.answer(choice)
        quiz.advance()
    assert quiz.phase == QuizPhase.FINISHED
    assert quiz.score == 2

def test_last_answer_wins(quiz):
    quiz.generate()
    quiz.answer("B")
    quiz.answer("C")
    quiz.answer("A")
    assert quiz.answers[0] == "A"
    assert quiz.questions[0].user_answer == "A"

def test_grading_is_case_sensitive(quiz):
    quiz.generate()
    for choice in ("a", "B", "C "):
        quiz.answer(choice)
        quiz.advance()
    assert quiz.score == 1

def test_cannot_advance_unanswered(quiz):
    quiz.generate()
    assert not quiz.can_advance()
    with pytest.raises(QuizStateError):
        quiz.advance()

def test_answer_requires_active_quiz(quiz):
    with pytest.raises(QuizStateError):
        quiz.answer("A")

@pytest.mark.parametrize("steps", [0, 1, 3])
def test_restart_from_any_state(quiz, steps):
    if steps:
        quiz.generate()
        for _ in range(steps):
            quiz.answer("A")
            quiz.advance()
    quiz.restart()
    assert (quiz.questions, quiz.answers, quiz.current_index, quiz.score, quiz.phase) == ([], [], 0, 0, QuizPhase.IDLE)

def test_failed_generation_stays_idle(quiz, client):
    client.error = ProxyError("The AI returned an unexpected format for the quiz.")
    with pytest.raises(ProxyError):
        quiz.generate()
    assert quiz.phase == QuizPhase.IDLE
    assert quiz.questions == []

def test_generate_without_material_skips_network(client):
    session = QuizSession(client)
    with pytest.raises(ProxyError, match="No text provided to generate quiz from."):
        session.generate()
    assert client.calls == []

def test_new_material_restarts_quiz(quiz):
    quiz.generate()
    quiz.answer("A")
    quiz.set_context_text("different material")
    assert quiz.phase == QuizPhase.IDLE
    assert quiz.questions == []

def test_result_of_superseded_generation_is_dropped(quiz, client):
    client.on_generate = quiz.restart
    quiz.generate()
    assert quiz.phase == QuizPhase.IDLE
    assert quiz.questions == []

def test_correct_answer_outside_options_always_scores_wrong(quiz, client):
    client.quiz = [QuizQuestion(question="q", options=["A", "B", "C", "D"], correct_answer="E")]
    quiz.generate()
    quiz.answer("A")
    quiz.advance()
    assert quiz.score == 0

def test_chat_history_excludes_greeting(client):
    chat = ChatSession(client, context_text="cells")
    assert chat.messages[0].text == GREETING
    chat.ask("first?")
    chat.ask("second?")
    _, question, history = client.calls[-1]
    assert question == "second?"
    assert [(t.role, t.parts[0].text) for t in history] == [("user", "first?"), ("model", "answer to first?")]
    assert [m.sender for m in chat.messages] == ["ai", "user", "ai", "user", "ai"]

def test_blank_question_is_ignored(client):
    chat = ChatSession(client, context_text="cells")
    assert chat.ask("   ") is None
    assert client.calls == []

def test_failed_answer_appends_apology(client):
    chat = ChatSession(client, context_text="cells")
    client.error = ProxyError("boom")
    with pytest.raises(ProxyError):
        chat.ask("why?")
    assert chat.messages[-1].text == "Sorry, I encountered an error: boom..."

def test_workspace_resets_features_on_new_text(client):
    workspace = StudyWorkspace(client)
    workspace.set_text("cells")
    workspace.quiz.generate()
    workspace.summarize()
    workspace.set_text("plants")
    assert workspace.quiz.phase == QuizPhase.IDLE
    assert workspace.summary is None
    assert [m.text for m in workspace.chat.messages] == [GREETING]

def test_workspace_rejects_empty_text(client):
    with pytest.raises(ProxyError, match="Please paste some text or upload a file."):
        StudyWorkspace(client).set_text("  ")

def test_workspace_clears_output_on_failure(client):
    workspace = StudyWorkspace(client)
    workspace.set_text("cells")
    assert workspace.suggest_videos() == ["cells explained"]
    client.error = ProxyError("service down")
    assert workspace.suggest_videos() == []
    assert workspace.error == "service down"
    workspace.dismiss_error()
    assert workspace.error is None

def test_workspace_notes_topic(client):
    workspace = StudyWorkspace(client)
    workspace.set_text("cells")
    assert workspace.create_notes("  energy ") == "notes"
    assert client.calls[-1] == ("create_notes", "energy")

def test_workspace_load_file(client):
    workspace = StudyWorkspace(client)
    assert workspace.load_file("notes.pdf") == "uploaded text"
    assert workspace.chat.context_text == "uploaded text"

def test_video_search_url():
    assert video_search_url("cells & energy") == "https://www.youtube.com/results?search_query=cells%20%26%20energy"
