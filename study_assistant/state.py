import logging
from enum import Enum
from typing import List, Optional
from urllib.parse import quote
from .client import ProxyClient, ProxyError
from .models import ChatPart, ChatTurn, Message, QuizQuestion

logger = logging.getLogger("study_assistant")

GREETING = "I've read your document. What would you like to ask about it?"

def video_search_url(query: str) -> str:
	return "https://www.youtube.com/results?search_query=" + quote(query, safe="")

class QuizPhase(str, Enum):
	IDLE = "idle"
	ACTIVE = "active"
	FINISHED = "finished"

class QuizStateError(Exception):
	pass

class QuizSession:
	"""Client-side quiz progress for one piece of source material.

	idle -> active on a successful generate(), active -> finished when the
	last question is advanced past, and restart() returns to idle from
	anywhere. Only answered questions can be advanced past.
	"""

	def __init__(self, client: ProxyClient, context_text: str = "") -> None:
		self.client = client
		self.context_text = context_text
		self.questions: List[QuizQuestion] = []
		self.answers: List[str] = []
		self.current_index = 0
		self.phase = QuizPhase.IDLE
		self.score = 0
		# bumped on every generate/restart so late results can be recognised as stale
		self._generation = 0

	@property
	def current_question(self) -> Optional[QuizQuestion]:
		if self.phase != QuizPhase.ACTIVE:
			return None
		return self.questions[self.current_index]

	def set_context_text(self, text: str) -> None:
		if text != self.context_text:
			self.context_text = text
			self.restart()

	def generate(self) -> List[QuizQuestion]:
		if not self.context_text:
			raise ProxyError("No text provided to generate quiz from.")
		self._generation += 1
		token = self._generation
		try:
			generated = self.client.generate_quiz(self.context_text)
		except ProxyError:
			if token == self._generation:
				self.restart()
			raise
		if token != self._generation:
			logger.debug({"event": "stale_quiz_discarded", "generation": token, "current": self._generation})
			return self.questions
		self.questions = [q.model_copy(update={"user_answer": None}) for q in generated]
		self.answers = [""] * len(self.questions)
		self.current_index = 0
		self.score = 0
		self.phase = QuizPhase.ACTIVE if self.questions else QuizPhase.IDLE
		logger.debug({"event": "quiz_started", "count": len(self.questions)})
		return self.questions

	def answer(self, option: str) -> None:
		if self.phase != QuizPhase.ACTIVE:
			raise QuizStateError(f"cannot answer while quiz is {self.phase.value}")
		self.answers[self.current_index] = option
		self.questions[self.current_index].user_answer = option

	def can_advance(self) -> bool:
		return self.phase == QuizPhase.ACTIVE and bool(self.answers[self.current_index])

	def advance(self) -> QuizPhase:
		if self.phase != QuizPhase.ACTIVE:
			raise QuizStateError(f"cannot advance while quiz is {self.phase.value}")
		if not self.answers[self.current_index]:
			raise QuizStateError("current question has not been answered")
		if self.current_index < len(self.questions) - 1:
			self.current_index += 1
			return self.phase
		self.score = sum(1 for q, a in zip(self.questions, self.answers) if a == q.correct_answer)
		self.phase = QuizPhase.FINISHED
		logger.debug({"event": "quiz_finished", "score": self.score, "total": len(self.questions)})
		return self.phase

	def restart(self) -> None:
		self._generation += 1
		self.questions = []
		self.answers = []
		self.current_index = 0
		self.score = 0
		self.phase = QuizPhase.IDLE

class ChatSession:
	def __init__(self, client: ProxyClient, context_text: str = "") -> None:
		self.client = client
		self.context_text = ""
		self.messages: List[Message] = []
		self.set_context_text(context_text)

	def set_context_text(self, text: str) -> None:
		self.context_text = text
		self.messages = [Message(sender="ai", text=GREETING)] if text else []

	def history_for_api(self) -> List[ChatTurn]:
		return [
			ChatTurn(role="user" if m.sender == "user" else "model", parts=[ChatPart(text=m.text)])
			for m in self.messages
			if not (m.sender == "ai" and m.text == GREETING)
		]

	def ask(self, question: str) -> Optional[Message]:
		if not question.strip():
			return None
		if not self.context_text:
			raise ProxyError("Please upload or provide text context first.")
		history = self.history_for_api()
		self.messages.append(Message(sender="user", text=question))
		try:
			result = self.client.answer_question(self.context_text, question, history)
		except ProxyError as e:
			self.messages.append(Message(sender="ai", text=f"Sorry, I encountered an error: {e.message[:100]}..."))
			raise
		reply = Message(sender="ai", text=result.text, grounding_metadata=result.grounding_metadata)
		self.messages.append(reply)
		return reply

class StudyWorkspace:
	"""The loaded study material plus each feature's latest output."""

	def __init__(self, client: ProxyClient) -> None:
		self.client = client
		self.text = ""
		self.quiz = QuizSession(client)
		self.chat = ChatSession(client)
		self.summary: Optional[str] = None
		self.notes: Optional[str] = None
		self.video_suggestions: List[str] = []
		self.error: Optional[str] = None

	def set_text(self, text: str) -> None:
		if not text.strip():
			raise ProxyError("Please paste some text or upload a file.")
		self.error = None
		self.text = text
		self.summary = None
		self.notes = None
		self.video_suggestions = []
		self.quiz.set_context_text(text)
		self.chat.set_context_text(text)

	def load_file(self, path: str) -> str:
		self.error = None
		try:
			text = self.client.upload_file(path)
		except ProxyError as e:
			self.error = e.message
			raise
		self.set_text(text)
		return text

	def dismiss_error(self) -> None:
		self.error = None

	def summarize(self) -> Optional[str]:
		if not self.text:
			return None
		self.error = None
		try:
			self.summary = self.client.summarize_text(self.text)
		except ProxyError as e:
			self.summary = None
			self.error = e.message
		return self.summary

	def create_notes(self, topic: Optional[str] = None) -> Optional[str]:
		if not self.text:
			return None
		self.error = None
		try:
			self.notes = self.client.create_notes(self.text, topic.strip() if topic else None)
		except ProxyError as e:
			self.notes = None
			self.error = e.message
		return self.notes

	def suggest_videos(self) -> List[str]:
		if not self.text:
			return []
		self.error = None
		try:
			self.video_suggestions = self.client.suggest_video_topics(self.text)
		except ProxyError as e:
			self.video_suggestions = []
			self.error = e.message
		return self.video_suggestions
