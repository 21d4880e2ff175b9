from typing import Any, Dict, List, Optional, Tuple
import logging
from quizhub.config import Config
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.models.schemas import RecommendedQuiz

logger = logging.getLogger(__name__)


def top_by_frequency(values: List[str], n: int) -> List[str]:
    """
    The n most frequent values.

    Ties keep first-encountered order: counts are collected in an
    insertion-ordered dict and sorted() is stable.
    """
    counts: Dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [value for value, _ in ranked[:n]]


class RecommendationEngine:
    """
    Suggests public quizzes the user has neither written nor attempted.
    - Favours the user's two most attempted topics and most attempted difficulty
    - Backfills with the newest remaining public quizzes up to the limit
    """

    def __init__(self, mongodb_client: MongoDBClient, limit: Optional[int] = None):
        self.mongodb = mongodb_client
        self.limit = limit or Config.RECOMMENDATION_LIMIT

    async def recommend(self, user_id: str) -> List[RecommendedQuiz]:
        attempts = self.mongodb.get_user_attempts(user_id)
        attempted_ids = list(dict.fromkeys(attempt["quiz_id"] for attempt in attempts))
        fav_topics, fav_difficulties = self.favourites(attempts)

        quizzes = self.mongodb.find_public_quizzes(
            exclude_ids=attempted_ids,
            exclude_creator=user_id,
            topics=fav_topics,
            difficulties=fav_difficulties,
            limit=self.limit,
        )

        if len(quizzes) < self.limit:
            selected_ids = {quiz["quiz_id"] for quiz in quizzes}
            backfill = self.mongodb.find_public_quizzes(
                exclude_ids=attempted_ids + list(selected_ids),
                exclude_creator=user_id,
                limit=self.limit - len(quizzes),
            )
            quizzes += [quiz for quiz in backfill if quiz["quiz_id"] not in selected_ids]

        quizzes = quizzes[:self.limit]
        logger.info(
            f"Recommending {len(quizzes)} quizzes to user {user_id} "
            f"(topics={fav_topics}, difficulty={fav_difficulties})"
        )

        authors = self.mongodb.get_user_names([quiz.get("created_by") for quiz in quizzes])
        return [self.summarize(quiz, authors) for quiz in quizzes]

    def favourites(self, attempts: List[Dict[str, Any]]) -> Tuple[List[str], List[str]]:
        """Top 2 topics and top difficulty over the attempted quizzes, oldest attempt first."""
        if not attempts:
            return [], []

        quizzes = {
            quiz["quiz_id"]: quiz
            for quiz in self.mongodb.get_quizzes_by_ids(list({attempt["quiz_id"] for attempt in attempts}))
        }
        topics = []
        difficulties = []
        for attempt in attempts:
            quiz = quizzes.get(attempt["quiz_id"])
            if quiz is None:
                continue
            topics.append(quiz.get("topic"))
            difficulties.append(quiz.get("difficulty"))

        return top_by_frequency(topics, 2), top_by_frequency(difficulties, 1)

    @staticmethod
    def summarize(quiz: Dict[str, Any], authors: Dict[str, str]) -> RecommendedQuiz:
        questions = quiz.get("questions") or []
        first_question = questions[0].get("question_text") if questions else None
        difficulty = quiz.get("difficulty") or Config.DEFAULT_DIFFICULTY
        return RecommendedQuiz(
            id=quiz["quiz_id"],
            title=f"{quiz.get('topic')} - {first_question or 'Untitled'}",
            author=authors.get(quiz.get("created_by"), "Unknown"),
            difficulty=difficulty.capitalize(),
        )
