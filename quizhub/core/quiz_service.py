from typing import Any, Dict, List, Optional
from datetime import datetime
import logging
from quizhub.config import Config
from quizhub.core.errors import ConflictError, NotFoundError, ValidationError
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.core.ratings import RatingAggregator, average_rating
from quizhub.models.schemas import (
    AttemptDetail,
    AuthorInfo,
    PopularSearch,
    Quiz,
    QuizDetail,
    QuizSummary,
    RecentAttempt,
    SavedQuiz,
)
from quizhub.utils.dates import relative_time
from quizhub.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

DIFFICULTY_LABELS = {
    "Beginner": "easy",
    "Intermediate": "medium",
    "Advanced": "hard",
}
ALL_CATEGORIES = "All Categories"
ALL_LEVELS = "All Levels"


def initials(name: Optional[str]) -> str:
    if not name:
        return ""
    return "".join(part[0] for part in name.split() if part).upper()


class QuizService:
    """
    Read side of the quiz catalogue: lookups, public listings, a user's
    bookmarks and attempt history.
    """

    def __init__(self, mongodb_client: MongoDBClient, rating_aggregator: RatingAggregator):
        self.mongodb = mongodb_client
        self.ratings = rating_aggregator

    async def get_quiz(self, quiz_id: str) -> QuizDetail:
        if not quiz_id:
            raise ValidationError("Quiz ID is required")

        quiz = self.mongodb.get_quiz(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        stats = await self.ratings.stats(quiz_id)
        return QuizDetail(**quiz, average_rating=stats.average)

    async def get_public_quizzes(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> List[QuizSummary]:
        """
        Public catalogue, newest first.

        Input: free-text search, category ("All Categories" for any) and
               difficulty, either a level label or a stored value ("All Levels" for any)
        Output: quiz summaries with attempt, rating and author data
        """
        search = search.strip() if search else None
        if search:
            self.track_search(search)
        if category == ALL_CATEGORIES:
            category = None
        if difficulty == ALL_LEVELS or not difficulty:
            difficulty = None
        else:
            difficulty = DIFFICULTY_LABELS.get(difficulty, difficulty.lower())

        quizzes = self.mongodb.search_public_quizzes(search=search, category=category, difficulty=difficulty)
        return self._summarize(quizzes)

    async def get_trending_quizzes(self, limit: int = 3) -> List[QuizSummary]:
        return self._summarize(self.mongodb.find_public_quizzes(limit=limit))

    async def get_user_quizzes(self, user_id: str) -> List[Quiz]:
        return [Quiz(**quiz) for quiz in self.mongodb.get_user_quizzes(user_id)]

    def track_search(self, query: str) -> None:
        query = query.strip().lower()
        if len(query) < 2:
            return
        self.mongodb.track_search_query(query)

    async def get_popular_searches(self, limit: int = 10) -> List[PopularSearch]:
        return [PopularSearch(**entry) for entry in self.mongodb.get_popular_search_queries(limit)]

    # Attempts

    async def get_recent_attempts(self, user_id: str, now: Optional[datetime] = None) -> List[RecentAttempt]:
        attempts = self.mongodb.get_user_attempts(user_id, limit=Config.RECENT_ATTEMPTS_LIMIT, newest_first=True)
        if not attempts:
            return []

        quizzes = {
            quiz["quiz_id"]: quiz
            for quiz in self.mongodb.get_quizzes_by_ids(list({attempt["quiz_id"] for attempt in attempts}))
        }

        recent = []
        for attempt in attempts:
            quiz = quizzes.get(attempt["quiz_id"])
            if not quiz or not quiz.get("questions"):
                continue

            total_questions = len(quiz["questions"])
            score = attempt.get("score") or 0
            title = f"{quiz.get('topic') or 'Untitled Quiz'} - {(quiz.get('difficulty') or 'medium').capitalize()}"
            created_at = attempt.get("created_at") or datetime.now()
            recent.append(RecentAttempt(
                id=attempt["attempt_id"],
                title=title,
                score=str(round_half_up(score / total_questions * 100)),
                date=relative_time(created_at, now),
                quiz_id=quiz["quiz_id"],
                quiz_title=title,
                total_questions=total_questions,
                correct_answers=score,
                time_taken=attempt.get("time_taken") or 0,
                completed_at=created_at.isoformat(),
            ))
        return recent

    async def get_attempt(self, attempt_id: str) -> AttemptDetail:
        attempt = self.mongodb.get_attempt(attempt_id)
        if not attempt:
            raise NotFoundError("Quiz attempt not found")

        quiz = self.mongodb.get_quiz(attempt["quiz_id"])
        return AttemptDetail(**attempt, quiz=Quiz(**quiz) if quiz else None)

    # Saved quizzes

    async def save_quiz(self, user_id: str, quiz_id: Optional[str]) -> None:
        if not quiz_id:
            raise ValidationError("quizId is required")
        if not self.mongodb.get_quiz(quiz_id):
            raise NotFoundError("Quiz not found")
        if not self.mongodb.insert_saved_quiz(user_id, quiz_id):
            raise ConflictError("Quiz already saved")
        logger.info(f"User {user_id} saved quiz {quiz_id}")

    async def unsave_quiz(self, user_id: str, quiz_id: str) -> None:
        if not self.mongodb.delete_saved_quiz(user_id, quiz_id):
            raise NotFoundError("Saved quiz not found")

    async def get_saved_quizzes(self, user_id: str) -> List[SavedQuiz]:
        saved_ids = self.mongodb.get_saved_quiz_ids(user_id)
        if not saved_ids:
            return []

        found = {quiz["quiz_id"]: quiz for quiz in self.mongodb.get_quizzes_by_ids(saved_ids)}
        quizzes = [found[quiz_id] for quiz_id in saved_ids if quiz_id in found]
        if not quizzes:
            return []

        ratings = await self.ratings.batch([quiz["quiz_id"] for quiz in quizzes])
        authors = self.mongodb.get_user_names([quiz.get("created_by") for quiz in quizzes])
        return [
            SavedQuiz(
                **quiz,
                author=authors.get(quiz.get("created_by"), "Unknown"),
                average_rating=ratings.get(quiz["quiz_id"], 0),
            )
            for quiz in quizzes
        ]

    def _summarize(self, quizzes: List[Dict[str, Any]]) -> List[QuizSummary]:
        if not quizzes:
            return []

        quiz_ids = [quiz["quiz_id"] for quiz in quizzes]
        ratings_by_quiz: Dict[str, List[int]] = {quiz_id: [] for quiz_id in quiz_ids}
        for rating in self.mongodb.get_ratings_for_quizzes(quiz_ids):
            ratings_by_quiz[rating["quiz_id"]].append(rating["rating"])
        authors = self.mongodb.get_user_names([quiz.get("created_by") for quiz in quizzes])

        summaries = []
        for quiz in quizzes:
            author_name = authors.get(quiz.get("created_by"))
            quiz_ratings = ratings_by_quiz[quiz["quiz_id"]]
            summaries.append(QuizSummary(
                quiz_id=quiz["quiz_id"],
                topic=quiz["topic"],
                description=quiz.get("description"),
                quiz_type=quiz.get("quiz_type", Config.DEFAULT_QUIZ_TYPE),
                difficulty=quiz.get("difficulty", Config.DEFAULT_DIFFICULTY),
                questions=quiz.get("questions") or [],
                is_public=quiz.get("is_public", False),
                time_limit=quiz.get("time_limit", True),
                created_at=quiz["created_at"],
                tags=quiz.get("tags") or [],
                attempts=self.mongodb.count_quiz_attempters(quiz["quiz_id"]),
                rating=average_rating(quiz_ratings),
                rating_count=len(quiz_ratings),
                author=AuthorInfo(
                    id=quiz.get("created_by"),
                    name=author_name or "Unknown",
                    initials=initials(author_name),
                ),
            ))
        return summaries
