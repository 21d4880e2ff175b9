from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging
from quizhub.api.dependencies import Services, get_current_user_id, get_optional_user_id, get_services
from quizhub.core.errors import QuizHubError
from quizhub.models.schemas import BatchRatingRequest, BatchRatingResponse, RatingRequest, RatingResult, RatingStats

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/quizzes/ratings/batch", response_model=BatchRatingResponse)
async def get_multiple_quiz_ratings(request: BatchRatingRequest, services: Services = Depends(get_services)):
    """Average rating for each requested quiz id (0 when unrated)."""
    try:
        ratings = await services.ratings.batch(request.quiz_ids)
        return BatchRatingResponse(ratings=ratings)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching multiple ratings: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch ratings")

@router.get("/quizzes/{quiz_id}/rating", response_model=RatingStats)
async def get_rating_stats(
    quiz_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    services: Services = Depends(get_services),
):
    """Average, count and, for an identified caller, their own rating."""
    try:
        return await services.ratings.stats(quiz_id, user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching rating stats for quiz {quiz_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch rating stats")

@router.post("/quizzes/{quiz_id}/rating", response_model=RatingResult)
async def rate_quiz(
    quiz_id: str,
    request: RatingRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Rate a public quiz from 1 to 5; rating again replaces the previous value.

    Raises:
        HTTPException: 400 for an invalid value, 404 for an unknown quiz,
            409 when rating one's own or a private quiz
    """
    try:
        return await services.ratings.rate(user_id, quiz_id, request.rating)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error rating quiz {quiz_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to rate quiz")
