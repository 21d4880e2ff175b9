from typing import Any, List, Optional
import logging
import math
from quizhub.core.errors import NotFoundError, ValidationError
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.models.schemas import Attempt, GradedAnswer, SubmissionResult, SubmittedAnswer

logger = logging.getLogger(__name__)

class GradingEngine:
    """
    Grades a submission against the stored quiz and records the attempt.

    Answers are matched to questions by question id; a submitted id that is not
    part of the quiz is skipped and never counted. Correctness is exact,
    case-sensitive string equality with the stored correct answer.
    """

    def __init__(self, mongodb_client: MongoDBClient):
        self.mongodb = mongodb_client

    async def submit(
        self,
        user_id: str,
        quiz_id: str,
        answers: Optional[List[SubmittedAnswer]],
        time_taken: Any = 0,
    ) -> SubmissionResult:
        if not quiz_id:
            raise ValidationError("Quiz ID is required")
        if not answers:
            raise ValidationError("Answers array is required")

        quiz = self.mongodb.get_quiz(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        questions = {question["question_id"]: question for question in quiz.get("questions") or []}
        if not questions:
            raise ValidationError("Quiz has no questions")

        score = 0
        graded = []
        for answer in answers:
            if not answer.question_id:
                continue
            question = questions.get(answer.question_id)
            if question is None:
                logger.warning(f"Skipping answer for unknown question {answer.question_id} in quiz {quiz_id}")
                continue

            selected_answer = answer.selected_answer or ""
            correct_answer = question.get("correct_answer") or ""
            is_correct = selected_answer == correct_answer
            if is_correct:
                score += 1

            graded.append(GradedAnswer(
                question_id=answer.question_id,
                selected_answer=selected_answer,
                is_correct=is_correct,
                correct_answer=correct_answer,
                explanation=question.get("explanation") or "",
            ))

        attempt = Attempt(
            user_id=user_id,
            quiz_id=quiz_id,
            answers=graded,
            score=score,
            time_taken=self.coerce_time_taken(time_taken),
        )
        self.mongodb.insert_attempt(attempt.model_dump())

        return SubmissionResult(
            score=score,
            total=len(quiz["questions"]),
            result=graded,
            attempt_id=attempt.attempt_id,
        )

    @staticmethod
    def coerce_time_taken(time_taken: Any) -> float:
        # bool is an int subclass but never a duration
        if isinstance(time_taken, bool) or not isinstance(time_taken, (int, float)):
            return 0
        if not math.isfinite(time_taken) or time_taken < 0:
            return 0
        return time_taken
