from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta
import asyncio
import logging
import math
from quizhub.config import Config
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.models.schemas import Badge, DailyScore, StatisticsResponse, StatisticsSnapshot
from quizhub.utils.dates import format_time_spent
from quizhub.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def get_badges(points: float, thresholds: Optional[List[int]] = None) -> List[Badge]:
    """Every star tier whose threshold is reached, not only the highest one."""
    badges = []
    for tier, threshold in enumerate(thresholds or Config.BADGE_THRESHOLDS, start=1):
        if points >= threshold:
            badges.append(Badge(
                id=f"star{tier}",
                name="1 Star" if tier == 1 else f"{tier} Stars",
                description=f"Earned {threshold} points",
                icon="⭐" * tier,
            ))
    return badges


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return value


def percentage(score: float, questions: int) -> int:
    return round_half_up(score / questions * 100) if questions > 0 else 0


def daily_scores(attempts: List[Dict[str, Any]], now: datetime, target: Optional[int] = None) -> List[DailyScore]:
    """Average percentage per calendar day over the last 7 days, oldest day first."""
    target = target if target is not None else Config.DAILY_SCORE_TARGET
    scores = []
    for days_back in range(6, -1, -1):
        date = now - timedelta(days=days_back)
        day_start = datetime(date.year, date.month, date.day)
        day_end = day_start + timedelta(days=1)

        day_attempts = [
            attempt for attempt in attempts
            if attempt.get("created_at") and day_start <= attempt["created_at"] < day_end
        ]
        day_score = percentage(
            sum(_number(attempt.get("score")) for attempt in day_attempts),
            sum(len(attempt.get("answers") or []) for attempt in day_attempts),
        )
        scores.append(DailyScore(
            day=DAY_NAMES[date.weekday()],
            score=day_score,
            target=target,
            above_target=day_score >= target,
        ))
    return scores


def compute_snapshot(
    quizzes_created: int,
    attempts: List[Dict[str, Any]],
    now: datetime,
    this_week_quizzes: int = 0,
    this_month_quizzes: int = 0,
) -> StatisticsSnapshot:
    """
    Fold a user's raw quiz and attempt history into a statistics snapshot.

    Pure: reads nothing but its arguments and never the cached statistics.
    """
    quizzes_completed = len(attempts)
    total_score = sum(_number(attempt.get("score")) for attempt in attempts)
    total_questions = sum(len(attempt.get("answers") or []) for attempt in attempts)
    total_time_spent = sum(_number(attempt.get("time_taken")) for attempt in attempts)
    points = quizzes_created * Config.CREATED_QUIZ_POINTS + quizzes_completed * Config.COMPLETED_QUIZ_POINTS

    return StatisticsSnapshot(
        quizzes_created=quizzes_created,
        quizzes_completed=quizzes_completed,
        quizzes_attempted=quizzes_completed,
        total_score=total_score,
        total_questions=total_questions,
        total_time_spent=total_time_spent,
        average_score=percentage(total_score, total_questions),
        points=points,
        badges=get_badges(points),
        time_spent_formatted=format_time_spent(total_time_spent),
        this_week_quizzes=this_week_quizzes,
        this_month_quizzes=this_month_quizzes,
        daily_scores=daily_scores(attempts, now),
    )


class StatisticsAggregator:
    """
    Per-user statistics, recomputed from quizzes and attempts on every request.

    The snapshot is then written to the statistics collection as a cache; the
    response is always the freshly computed snapshot.
    """

    def __init__(self, mongodb_client: MongoDBClient, clock=None):
        self.mongodb = mongodb_client
        self.clock = clock or datetime.now

    async def get_user_stats(self, user_id: str) -> StatisticsResponse:
        now = self.clock()

        quizzes_created, this_week, this_month, attempts = await asyncio.gather(
            asyncio.to_thread(self.mongodb.count_user_quizzes, user_id),
            asyncio.to_thread(self.mongodb.count_user_quizzes, user_id, now - timedelta(days=7)),
            asyncio.to_thread(self.mongodb.count_user_quizzes, user_id, now - timedelta(days=30)),
            asyncio.to_thread(self.mongodb.get_user_attempts, user_id),
        )

        snapshot = compute_snapshot(quizzes_created, attempts, now, this_week, this_month)
        self.persist_snapshot(user_id, snapshot)

        return StatisticsResponse(**snapshot.model_dump(), time_spent=snapshot.time_spent_formatted)

    def persist_snapshot(self, user_id: str, snapshot: StatisticsSnapshot) -> None:
        self.mongodb.upsert_statistics(user_id, snapshot.model_dump(include={
            "quizzes_created",
            "quizzes_completed",
            "total_score",
            "total_questions",
            "total_time_spent",
            "points",
            "badges",
        }))
        logger.info(f"Cached statistics for user {user_id}: {snapshot.points} points, {len(snapshot.badges)} badges")
