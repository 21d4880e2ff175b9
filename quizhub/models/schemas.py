from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime
import uuid

QuizType = Literal["multiple-choice", "true-false", "mixed"]
QuestionType = Literal["multiple-choice", "true-false"]
Difficulty = Literal["easy", "medium", "hard"]


def new_id() -> str:
    return str(uuid.uuid4())


def _clean_text(value):
    # Generated answers come back as numbers for maths topics; store them as trimmed text
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


# Stored documents

class Question(BaseModel):
    question_id: str = Field(default_factory=new_id)
    question_text: str = Field(validation_alias=AliasChoices("question_text", "questionText"))
    options: List[str] = []
    correct_answer: str = Field(validation_alias=AliasChoices("correct_answer", "correctAnswer"))
    explanation: str = ""
    type: Optional[QuestionType] = None

    @field_validator("question_text", "correct_answer", mode="before")
    @classmethod
    def _text(cls, value):
        return _clean_text(value)

    @field_validator("options", mode="before")
    @classmethod
    def _options(cls, value):
        if isinstance(value, list):
            return [_clean_text(option) for option in value]
        return value

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation(cls, value):
        return "" if value is None else _clean_text(value)

class QuizPrompt(BaseModel):
    prompt_id: str = Field(default_factory=new_id)
    topic: str
    description: Optional[str] = None
    difficulty: Difficulty = "medium"
    number_of_questions: int = 5
    quiz_type: QuizType = "multiple-choice"
    created_at: datetime = Field(default_factory=datetime.now)

class Quiz(BaseModel):
    quiz_id: str = Field(default_factory=new_id)
    topic: str
    description: Optional[str] = None
    quiz_type: QuizType = "multiple-choice"
    difficulty: Difficulty = "medium"
    is_public: bool = False
    time_limit: bool = True
    questions: List[Question]
    tags: List[str] = []
    prompt_ref: Optional[str] = None
    created_by: str
    created_at: datetime = Field(default_factory=datetime.now)

class GradedAnswer(BaseModel):
    question_id: str
    selected_answer: str
    is_correct: bool
    correct_answer: str
    explanation: str = ""

class Attempt(BaseModel):
    attempt_id: str = Field(default_factory=new_id)
    user_id: str
    quiz_id: str
    answers: List[GradedAnswer] = []
    score: int = 0
    time_taken: float = 0
    created_at: datetime = Field(default_factory=datetime.now)

class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str


# Requests

class QuizGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[str] = None
    number_of_questions: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("number_of_questions", "numberOfQuestions")
    )
    quiz_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("quiz_type", "quizType"))
    is_public: bool = Field(default=False, validation_alias=AliasChoices("is_public", "isPublic"))
    time_limit: bool = Field(default=True, validation_alias=AliasChoices("time_limit", "timeLimit"))
    tags: List[str] = []

class SubmittedAnswer(BaseModel):
    question_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("question_id", "_id", "questionId")
    )
    selected_answer: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("selected_answer", "selectedAnswer")
    )

class QuizSubmission(BaseModel):
    answers: Optional[List[SubmittedAnswer]] = None
    # Coerced by the grading engine; anything but a finite non-negative number becomes 0
    time_taken: Any = Field(default=None, validation_alias=AliasChoices("time_taken", "timeTaken"))

class RatingRequest(BaseModel):
    rating: Any = None

class BatchRatingRequest(BaseModel):
    quiz_ids: Optional[List[str]] = Field(default=None, validation_alias=AliasChoices("quiz_ids", "quizIds"))

class SaveQuizRequest(BaseModel):
    quiz_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("quiz_id", "quizId"))


# Responses

class QuizResponse(BaseModel):
    message: str
    quiz: Quiz

class QuizDetail(Quiz):
    average_rating: float = 0

class SubmissionResult(BaseModel):
    score: int
    total: int
    result: List[GradedAnswer]
    attempt_id: str

class RatingStats(BaseModel):
    average: float
    count: int
    user_rating: Optional[int] = None

class RatingResult(BaseModel):
    message: str = "Rating updated successfully"
    rating: int
    average_rating: float
    total_ratings: int

class BatchRatingResponse(BaseModel):
    ratings: Dict[str, float]

class RecommendedQuiz(BaseModel):
    id: str
    title: str
    author: str
    difficulty: str

class AuthorInfo(BaseModel):
    id: Optional[str] = None
    name: str = "Unknown"
    initials: str = ""

class QuizSummary(BaseModel):
    quiz_id: str
    topic: str
    description: Optional[str] = None
    quiz_type: str
    difficulty: str
    questions: List[Question] = []
    is_public: bool
    time_limit: bool
    created_at: datetime
    tags: List[str] = []
    attempts: int = 0
    rating: float = 0
    rating_count: int = 0
    author: AuthorInfo

class SavedQuiz(Quiz):
    author: str = "Unknown"
    average_rating: float = 0

class RecentAttempt(BaseModel):
    id: str
    title: str
    score: str
    date: str
    quiz_id: str
    quiz_title: str
    total_questions: int
    correct_answers: int
    time_taken: float
    completed_at: str

class AttemptDetail(Attempt):
    quiz: Optional[Quiz] = None

class PopularSearch(BaseModel):
    query: str
    count: int

class DailyScore(BaseModel):
    day: str
    score: int
    target: int
    above_target: bool

class StatisticsSnapshot(BaseModel):
    quizzes_created: int
    quizzes_completed: int
    quizzes_attempted: int
    total_score: int
    total_questions: int
    total_time_spent: float
    average_score: int
    points: float
    badges: List[Badge] = []
    time_spent_formatted: str
    this_week_quizzes: int = 0
    this_month_quizzes: int = 0
    daily_scores: List[DailyScore] = []

class StatisticsResponse(StatisticsSnapshot):
    message: str = "Statistics retrieved successfully"
    time_spent: str
