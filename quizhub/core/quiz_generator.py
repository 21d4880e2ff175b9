from typing import List, Optional
import logging
from quizhub.config import Config
from quizhub.core.errors import InternalError, UpstreamError, ValidationError
from quizhub.core.llm import GeminiLLMWrapper
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.core.normalizer import ResponseNormalizer
from quizhub.models.schemas import Quiz, QuizGenerationRequest, QuizPrompt
from quizhub.prompts import quiz_prompts

logger = logging.getLogger(__name__)

VALID_DIFFICULTIES = ("easy", "medium", "hard")
VALID_QUIZ_TYPES = ("multiple-choice", "true-false", "mixed")

class QuizGenerator:
    """
    Creates quizzes through the generation service.
    - Validates the request and fills in defaults
    - Builds the prompt, calls the LLM and normalizes its reply
    - Persists the generation request and the quiz only once normalization succeeded
    """

    def __init__(self, llm_wrapper: GeminiLLMWrapper, mongodb_client: MongoDBClient, normalizer: Optional[ResponseNormalizer] = None):
        self.llm = llm_wrapper
        self.mongodb = mongodb_client
        self.normalizer = normalizer or ResponseNormalizer()

    async def generate_quiz(self, user_id: str, request: QuizGenerationRequest) -> Quiz:
        """
        Generate and store a quiz for the given author.

        Input: user_id (str), request (QuizGenerationRequest)
        Output: the stored Quiz
        Raises: ValidationError on bad input, UpstreamError when generation
                fails or yields no questions
        """
        self.validate_request(request)

        topic = request.topic.strip()
        difficulty = request.difficulty or Config.DEFAULT_DIFFICULTY
        count = request.number_of_questions or Config.DEFAULT_QUESTION_COUNT
        quiz_type = request.quiz_type or Config.DEFAULT_QUIZ_TYPE

        prompt = quiz_prompts.build_quiz_prompt(topic, request.description, difficulty, count, quiz_type)
        raw_text = await self.llm.generate_text(prompt, quiz_prompts.SYSTEM_MESSAGE)
        questions = self.normalizer.normalize(raw_text, quiz_type)
        if not questions:
            raise UpstreamError("Quiz generation returned no questions")

        quiz_prompt = QuizPrompt(
            topic=topic,
            description=request.description,
            difficulty=difficulty,
            number_of_questions=count,
            quiz_type=quiz_type,
        )
        quiz = Quiz(
            topic=topic,
            description=request.description,
            quiz_type=quiz_type,
            difficulty=difficulty,
            is_public=request.is_public,
            time_limit=request.time_limit,
            questions=questions,
            tags=self._normalize_tags(request.tags),
            prompt_ref=quiz_prompt.prompt_id,
            created_by=user_id,
        )

        self.mongodb.save_quiz_prompt(quiz_prompt.model_dump())
        try:
            self.mongodb.insert_quiz(quiz.model_dump())
        except InternalError:
            # No request record without its quiz
            self.mongodb.delete_quiz_prompt(quiz_prompt.prompt_id)
            raise
        logger.info(f"Created {quiz_type} quiz {quiz.quiz_id} on '{topic}' with {len(questions)} questions")
        return quiz

    @staticmethod
    def validate_request(request: QuizGenerationRequest) -> None:
        if not request.topic or not request.topic.strip():
            raise ValidationError("Topic is required")
        if request.difficulty and request.difficulty not in VALID_DIFFICULTIES:
            raise ValidationError("Invalid difficulty level")
        if request.number_of_questions is not None and not 1 <= request.number_of_questions <= Config.MAX_QUESTIONS:
            raise ValidationError(f"Number of questions must be between 1 and {Config.MAX_QUESTIONS}")
        if request.quiz_type and request.quiz_type not in VALID_QUIZ_TYPES:
            raise ValidationError("Invalid quiz type")

    @staticmethod
    def _normalize_tags(tags: List[str]) -> List[str]:
        normalized = []
        for tag in tags:
            tag = tag.strip().lower()
            if tag and tag not in normalized:
                normalized.append(tag)
        return normalized
