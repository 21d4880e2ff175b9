from fastapi import Header, Request
from typing import Optional
from quizhub.core.errors import AuthenticationError
from quizhub.core.grading import GradingEngine
from quizhub.core.llm import GeminiLLMWrapper
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.core.normalizer import ResponseNormalizer
from quizhub.core.quiz_generator import QuizGenerator
from quizhub.core.quiz_service import QuizService
from quizhub.core.ratings import RatingAggregator
from quizhub.core.recommendations import RecommendationEngine
from quizhub.core.statistics import StatisticsAggregator


class Services:
    """The quiz services wired to one LLM gateway and one MongoDB client."""

    def __init__(self, llm_wrapper: GeminiLLMWrapper, mongodb_client: MongoDBClient, normalizer: Optional[ResponseNormalizer] = None):
        self.mongodb = mongodb_client
        self.generator = QuizGenerator(llm_wrapper, mongodb_client, normalizer)
        self.grading = GradingEngine(mongodb_client)
        self.ratings = RatingAggregator(mongodb_client)
        self.quizzes = QuizService(mongodb_client, self.ratings)
        self.recommendations = RecommendationEngine(mongodb_client)
        self.statistics = StatisticsAggregator(mongodb_client)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity resolved by the auth gateway and forwarded as X-User-Id."""
    if not x_user_id:
        raise AuthenticationError("Authentication required")
    return x_user_id


def get_optional_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_user_id or None
