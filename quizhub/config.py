import os
from dotenv import load_dotenv
from typing import List

load_dotenv()

class Config:
    # API Keys
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

    # Model Settings
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))
    GEMINI_MAX_OUTPUT_TOKENS: int = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "8192"))
    GENERATION_TIMEOUT: float = float(os.getenv("GENERATION_TIMEOUT", "60"))

    # MongoDB Settings
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "quizhub")
    QUIZ_COLLECTION: str = "quizzes"
    PROMPT_COLLECTION: str = "quiz_prompts"
    ATTEMPT_COLLECTION: str = "quiz_attempts"
    RATING_COLLECTION: str = "quiz_ratings"
    STATISTICS_COLLECTION: str = "user_statistics"
    SAVED_QUIZ_COLLECTION: str = "saved_quizzes"
    SEARCH_QUERY_COLLECTION: str = "search_queries"
    USER_COLLECTION: str = "users"

    # Quiz generation defaults
    DEFAULT_DIFFICULTY: str = "medium"
    DEFAULT_QUESTION_COUNT: int = 5
    DEFAULT_QUIZ_TYPE: str = "multiple-choice"
    MAX_QUESTIONS: int = 50

    # Aggregation settings
    RECOMMENDATION_LIMIT: int = 10
    RECENT_ATTEMPTS_LIMIT: int = 50
    DAILY_SCORE_TARGET: int = 85
    BADGE_THRESHOLDS: List[int] = [10, 20, 30, 40, 50]
    CREATED_QUIZ_POINTS: float = 1.0
    COMPLETED_QUIZ_POINTS: float = 0.5

    # Server Settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate_config(cls):
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY is required")
        if not cls.MONGODB_URI:
            raise ValueError("MONGODB_URI is required")
