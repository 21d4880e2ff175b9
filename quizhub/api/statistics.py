from fastapi import APIRouter, Depends, HTTPException
import logging
from quizhub.api.dependencies import Services, get_current_user_id, get_services
from quizhub.core.errors import QuizHubError
from quizhub.models.schemas import StatisticsResponse

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/statistics", response_model=StatisticsResponse)
async def get_user_statistics(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Get the caller's statistics.

    Recomputed from their quizzes and attempts on every call: counters,
    average score, time spent, points, badges, quizzes created this week and
    month, and the last 7 days of daily scores.
    """
    try:
        return await services.statistics.get_user_stats(user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching statistics for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user statistics")
