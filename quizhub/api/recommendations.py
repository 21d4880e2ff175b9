from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging
from quizhub.api.dependencies import Services, get_current_user_id, get_services
from quizhub.core.errors import QuizHubError
from quizhub.models.schemas import RecommendedQuiz

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/recommendations", response_model=List[RecommendedQuiz])
async def get_recommended_quizzes(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Public quizzes the caller has neither written nor attempted, preferring
    the topics and difficulty they attempt most.
    """
    try:
        return await services.recommendations.recommend(user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching recommended quizzes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch recommended quizzes")
