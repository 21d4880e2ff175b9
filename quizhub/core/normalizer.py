import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from quizhub.core.errors import UpstreamError
from quizhub.models.schemas import Question

logger = logging.getLogger(__name__)

class ResponseNormalizer:
    """
    Turns the generation service's free-text reply into typed questions.

    The reply is expected to contain a JSON array somewhere in it; everything
    before the first '[' and after the last ']' is discarded. Swap in a
    stricter subclass by overriding extract_json_array.
    """

    def normalize(self, raw_text: str, quiz_type: str) -> List[Question]:
        items = self.parse_questions(raw_text)

        questions = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise UpstreamError(f"Failed to parse generated quiz: question {index + 1} is not an object")
            # The question type is always resolved here, never taken from the reply
            item = {key: value for key, value in item.items() if key != "type"}
            try:
                question = Question.model_validate(item)
            except PydanticValidationError as e:
                raise UpstreamError(f"Failed to parse generated quiz: question {index + 1} is malformed ({e.error_count()} errors)")

            question.type = self.resolve_type(question, quiz_type)
            if question.options and question.correct_answer not in question.options:
                logger.warning(f"Generated question {index + 1} has a correct answer outside its options")
            questions.append(question)

        return questions

    def parse_questions(self, raw_text: str) -> List[Dict[str, Any]]:
        json_text = self.extract_json_array(raw_text or "")
        try:
            parsed = json.loads(json_text)
        except json.JSONDecodeError as e:
            logger.error(f"Could not decode generated quiz JSON: {e}")
            raise UpstreamError(f"Failed to parse generated quiz: {e}")

        if not isinstance(parsed, list):
            raise UpstreamError("Failed to parse generated quiz: expected a JSON array")
        return parsed

    def extract_json_array(self, raw_text: str) -> str:
        start = raw_text.find("[")
        end = raw_text.rfind("]")
        if start == -1 or end == -1 or end < start:
            raise UpstreamError("Failed to parse generated quiz: no JSON array found in response")
        return raw_text[start:end + 1]

    @staticmethod
    def resolve_type(question: Question, quiz_type: str) -> str:
        if quiz_type == "mixed":
            return "true-false" if len(question.options) == 2 else "multiple-choice"
        return quiz_type
