from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
import logging
from quizhub.api.dependencies import Services, get_current_user_id, get_services
from quizhub.core.errors import QuizHubError
from quizhub.models.schemas import (
    AttemptDetail,
    PopularSearch,
    Quiz,
    QuizDetail,
    QuizGenerationRequest,
    QuizResponse,
    QuizSubmission,
    QuizSummary,
    RecentAttempt,
    SavedQuiz,
    SaveQuizRequest,
    SubmissionResult,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/quizzes", response_model=QuizResponse, status_code=201)
async def generate_quiz(
    request: QuizGenerationRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Generate a quiz with the LLM and store it for the caller.

    Args:
        request (QuizGenerationRequest): topic, optional description, difficulty,
            number of questions, quiz type, visibility, time limit and tags

    Returns:
        QuizResponse: the created quiz with resolved question types

    Raises:
        HTTPException: 400 for invalid input, 500 if generation or storage fails
    """
    try:
        quiz = await services.generator.generate_quiz(user_id, request)
        return QuizResponse(message="Quiz created successfully", quiz=quiz)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error generating quiz: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate quiz")

@router.get("/quizzes/public", response_model=List[QuizSummary])
async def get_public_quizzes(
    search: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    sort: str = "recent",
    services: Services = Depends(get_services),
):
    # Every sort order is currently newest first
    try:
        return await services.quizzes.get_public_quizzes(search=search, category=category, difficulty=difficulty)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching public quizzes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch public quizzes")

@router.get("/quizzes/trending", response_model=List[QuizSummary])
async def get_trending_quizzes(limit: int = 3, services: Services = Depends(get_services)):
    try:
        return await services.quizzes.get_trending_quizzes(limit)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching trending quizzes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch trending quizzes")

@router.get("/quizzes/search/popular", response_model=List[PopularSearch])
async def get_popular_searches(limit: int = 10, services: Services = Depends(get_services)):
    try:
        return await services.quizzes.get_popular_searches(limit)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching popular searches: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch popular searches")

@router.get("/quizzes/saved", response_model=List[SavedQuiz])
async def get_saved_quizzes(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    try:
        return await services.quizzes.get_saved_quizzes(user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching saved quizzes: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch saved quizzes")

@router.post("/quizzes/saved", status_code=201)
async def save_quiz(
    request: SaveQuizRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    try:
        await services.quizzes.save_quiz(user_id, request.quiz_id)
        return {"message": "Quiz saved"}
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error saving quiz: {e}")
        raise HTTPException(status_code=500, detail="Failed to save quiz")

@router.delete("/quizzes/saved/{quiz_id}")
async def unsave_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    try:
        await services.quizzes.unsave_quiz(user_id, quiz_id)
        return {"message": "Quiz removed from saved"}
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error removing saved quiz: {e}")
        raise HTTPException(status_code=500, detail="Failed to remove saved quiz")

@router.get("/quizzes/attempts/recent", response_model=List[RecentAttempt])
async def get_recent_attempts(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    try:
        return await services.quizzes.get_recent_attempts(user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching recent attempts: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch recent attempts")

@router.get("/quizzes/attempts/{attempt_id}", response_model=AttemptDetail)
async def get_attempt(attempt_id: str, services: Services = Depends(get_services)):
    try:
        return await services.quizzes.get_attempt(attempt_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching attempt {attempt_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch quiz attempt")

@router.get("/quizzes/user/{user_id}", response_model=List[Quiz])
async def get_user_quizzes(user_id: str, services: Services = Depends(get_services)):
    try:
        return await services.quizzes.get_user_quizzes(user_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching quizzes of user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user quizzes")

@router.get("/quizzes/{quiz_id}", response_model=QuizDetail)
async def get_quiz(quiz_id: str, services: Services = Depends(get_services)):
    """
    Get a quiz with its current average rating.

    Raises:
        HTTPException: 404 if the quiz does not exist
    """
    try:
        return await services.quizzes.get_quiz(quiz_id)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching quiz {quiz_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch quiz")

@router.post("/quizzes/{quiz_id}/submit", response_model=SubmissionResult, status_code=201)
async def submit_quiz(
    quiz_id: str,
    submission: QuizSubmission,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Grade the caller's answers and record the attempt.

    Answers referring to questions that are not part of the quiz are ignored.
    `total` is the number of questions in the quiz, not the number of answers.
    """
    try:
        return await services.grading.submit(user_id, quiz_id, submission.answers, submission.time_taken)
    except QuizHubError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error submitting quiz {quiz_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit quiz")
