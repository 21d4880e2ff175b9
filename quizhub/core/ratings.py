from typing import Any, Dict, Iterable, List, Optional
from collections import defaultdict
import logging
from quizhub.core.errors import ConflictError, NotFoundError, ValidationError
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.models.schemas import RatingResult, RatingStats
from quizhub.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


def average_rating(values: Iterable[float]) -> float:
    """Arithmetic mean rounded to 2 decimals, 0 for no values."""
    values = list(values)
    if not values:
        return 0
    return round_half_up(sum(values) / len(values), 2)


class RatingAggregator:
    """
    One rating per (user, quiz), last write wins.

    Only public quizzes can be rated, and never by their author.
    """

    def __init__(self, mongodb_client: MongoDBClient):
        self.mongodb = mongodb_client

    async def rate(self, user_id: str, quiz_id: str, value: Any) -> RatingResult:
        quiz = self.mongodb.get_quiz(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")
        if quiz.get("created_by") == user_id:
            raise ConflictError("You cannot rate your own quiz")
        if not quiz.get("is_public"):
            raise ConflictError("You can only rate public quizzes")
        rating = self.validate_rating(value)

        stored = self.mongodb.upsert_rating(user_id, quiz_id, rating)
        stats = await self.stats(quiz_id)

        return RatingResult(
            rating=stored["rating"],
            average_rating=stats.average,
            total_ratings=stats.count,
        )

    async def stats(self, quiz_id: str, user_id: Optional[str] = None) -> RatingStats:
        ratings = self.mongodb.get_quiz_ratings(quiz_id)

        user_rating = None
        if user_id:
            own = self.mongodb.get_user_rating(user_id, quiz_id)
            user_rating = own["rating"] if own else None

        return RatingStats(
            average=average_rating(r["rating"] for r in ratings),
            count=len(ratings),
            user_rating=user_rating,
        )

    async def batch(self, quiz_ids: List[str]) -> Dict[str, float]:
        """Average rating per quiz id from a single ratings query; 0 for unrated ids."""
        if quiz_ids is None or not isinstance(quiz_ids, list):
            raise ValidationError("quizIds must be an array")

        by_quiz: Dict[str, List[int]] = defaultdict(list)
        if quiz_ids:
            for rating in self.mongodb.get_ratings_for_quizzes(quiz_ids):
                by_quiz[rating["quiz_id"]].append(rating["rating"])

        return {quiz_id: average_rating(by_quiz.get(quiz_id, [])) for quiz_id in quiz_ids}

    @staticmethod
    def validate_rating(value: Any) -> int:
        if isinstance(value, bool):
            raise ValidationError("Rating must be between 1 and 5")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or not 1 <= value <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        return value
