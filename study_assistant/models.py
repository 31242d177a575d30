from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

class ActionName(str, Enum):
    EXTRACT_TEXT_FROM_FILE = "extractTextFromFile"
    SUMMARIZE_TEXT = "summarizeText"
    ANSWER_QUESTION = "answerQuestion"
    GENERATE_QUIZ = "generateQuiz"
    CREATE_NOTES = "createNotes"
    SUGGEST_VIDEO_TOPICS = "suggestVideoTopics"

class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

# Action payloads

class ExtractTextFromFileData(WireModel):
    file_name: str = Field(alias="fileName", min_length=1)
    file_data: str = Field(alias="fileData", min_length=1)

class SummarizeTextData(WireModel):
    text: str = Field(min_length=1)

class ChatPart(WireModel):
    text: str

class ChatTurn(WireModel):
    role: Literal["user", "model"]
    parts: List[ChatPart]

class AnswerQuestionData(WireModel):
    context_text: str = Field(alias="contextText", min_length=1)
    question: str = Field(min_length=1)
    chat_history: List[ChatTurn] = Field(alias="chatHistory")

class GenerateQuizData(WireModel):
    context_text: str = Field(alias="contextText", min_length=1)

class CreateNotesData(WireModel):
    text: str = Field(min_length=1)
    topic: Optional[str] = None

class SuggestVideoTopicsData(WireModel):
    text: str = Field(min_length=1)

# Requests

class ExtractTextFromFileRequest(WireModel):
    action: Literal["extractTextFromFile"]
    data: ExtractTextFromFileData

class SummarizeTextRequest(WireModel):
    action: Literal["summarizeText"]
    data: SummarizeTextData

class AnswerQuestionRequest(WireModel):
    action: Literal["answerQuestion"]
    data: AnswerQuestionData

class GenerateQuizRequest(WireModel):
    action: Literal["generateQuiz"]
    data: GenerateQuizData

class CreateNotesRequest(WireModel):
    action: Literal["createNotes"]
    data: CreateNotesData

class SuggestVideoTopicsRequest(WireModel):
    action: Literal["suggestVideoTopics"]
    data: SuggestVideoTopicsData

ActionRequest = Annotated[
    Union[
        ExtractTextFromFileRequest,
        SummarizeTextRequest,
        AnswerQuestionRequest,
        GenerateQuizRequest,
        CreateNotesRequest,
        SuggestVideoTopicsRequest,
    ],
    Field(discriminator="action"),
]

action_request_adapter = TypeAdapter(ActionRequest)

# Results

class QuizQuestion(WireModel):
    # extra keys the model adds (explanations, hints) are kept and passed on
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    question: str
    options: List[str]
    correct_answer: str = Field(alias="correctAnswer")
    user_answer: Optional[str] = Field(default=None, alias="userAnswer")

quiz_adapter = TypeAdapter(List[QuizQuestion])

class ExtractTextResult(WireModel):
    extracted_text: str = Field(alias="extractedText")

class SummaryResult(WireModel):
    summary: str

class AnswerResult(WireModel):
    text: str
    grounding_metadata: Optional[Dict[str, Any]] = Field(default=None, alias="groundingMetadata")

class QuizResult(WireModel):
    quiz: List[QuizQuestion]

class NotesResult(WireModel):
    notes: str

class VideoSuggestionsResult(WireModel):
    suggestions: List[str]

class ErrorResult(WireModel):
    error: str
    details: Optional[str] = None

ActionResult = Union[
    ExtractTextResult,
    SummaryResult,
    AnswerResult,
    QuizResult,
    NotesResult,
    VideoSuggestionsResult,
]

class DispatchResult(BaseModel):
    status_code: int
    body: Dict[str, Any]

# Client-side conversation

class Message(WireModel):
    sender: Literal["user", "ai"]
    text: str
    grounding_metadata: Optional[Dict[str, Any]] = Field(default=None, alias="groundingMetadata")
