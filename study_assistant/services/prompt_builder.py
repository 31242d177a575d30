from typing import Optional

class PromptBuilder:
	def summary(self, text: str) -> str:
		return (
			"Summarize the following text for a student preparing for an exam. "
			"Focus on key concepts and main points. "
			"The summary should be detailed yet concise to save time:\n\n"
			f"{text}"
		)

	def qna_system_instruction(self, context_text: str) -> str:
		return (
			"You are an AI assistant. The user has provided a document. "
			"Your task is to answer the user's questions based *solely* on the content of this document and the ongoing conversation history.\n"
			"Do not use any external knowledge or information not present in the provided document text.\n"
			"If the answer cannot be found within the document or the conversation history, "
			"explicitly state that the information is not available in the provided materials.\n"
			"The document context is:\n"
			"---START OF DOCUMENT---\n"
			f"{context_text}\n"
			"---END OF DOCUMENT---\n"
		)

	def quiz(self, context_text: str) -> str:
		return (
			"Generate a quiz with 5 multiple-choice questions based on the following text. "
			"Each question should have exactly 4 options, and one option must be the correct answer. "
			"Return the quiz as a JSON array. Each object in the array should have the following fields: "
			"\"question\" (string), \"options\" (array of 4 strings), and \"correctAnswer\" "
			"(string, which must be one of the provided options). Ensure the JSON is valid.\n\n"
			f"Text context:\n{context_text}"
		)

	def notes(self, text: str, topic: Optional[str] = None) -> str:
		prompt = (
			"Generate detailed yet summarized study notes from the following text. "
			"The notes should be well-structured, focusing on key definitions, concepts, and important facts."
		)
		if topic:
			prompt += f" Pay special attention to aspects related to \"{topic}\"."
		return prompt + f"\n\nText:\n{text}"

	def video_topics(self, text: str) -> str:
		return (
			"Based on the key concepts in the following text, suggest 3 to 5 YouTube search queries "
			"for finding helpful video tutorials. Provide only the search queries as a JSON array of strings. "
			"For example: [\"how to learn X\", \"Y explained simply\", \"introduction to Z\"].\n\n"
			f"Text:\n{text}"
		)
