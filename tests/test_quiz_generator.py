"""
Unit tests for quiz generation and its persistence rules.
"""
import unittest
from unittest.mock import patch

from quizhub.core.errors import InternalError, UpstreamError, ValidationError
from quizhub.core.quiz_generator import QuizGenerator
from quizhub.models.schemas import QuizGenerationRequest
from quizhub.prompts.quiz_prompts import SYSTEM_MESSAGE
from tests.fixtures import FakeMongoDBClient, SampleData


class TestQuizGenerator(unittest.IsolatedAsyncioTestCase):
    """Test the generate, normalize and store sequence."""

    def setUp(self):
        self.mongodb = FakeMongoDBClient()

    def _generator(self, reply):
        self.llm = SampleData.fake_llm(reply)
        return QuizGenerator(self.llm, self.mongodb)

    async def test_true_false_algebra_quiz(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(5, "true-false")))
        request = QuizGenerationRequest.model_validate({
            "topic": "Algebra",
            "difficulty": "easy",
            "numberOfQuestions": 5,
            "quizType": "true-false",
        })

        quiz = await generator.generate_quiz("user-1", request)

        self.assertEqual(len(quiz.questions), 5)
        for question in quiz.questions:
            self.assertEqual(question.type, "true-false")
            self.assertEqual(question.options, ["True", "False"])
            self.assertIn(question.correct_answer, ("True", "False"))
        self.assertEqual(quiz.topic, "Algebra")
        self.assertEqual(quiz.difficulty, "easy")
        self.assertEqual(quiz.created_by, "user-1")
        self.assertFalse(quiz.is_public)

        prompt = self.llm.generate_text.call_args.args[0]
        self.assertIn('Generate 5 easy level true-false quiz questions on the topic "Algebra".', prompt)
        self.assertEqual(self.llm.generate_text.call_args.args[1], SYSTEM_MESSAGE)

    async def test_persists_prompt_and_quiz(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(3)))
        request = QuizGenerationRequest(topic="  Rivers ", tags=["Geo", "geo ", " Water", ""], is_public=True)

        quiz = await generator.generate_quiz("user-1", request)

        self.assertEqual(len(self.mongodb.prompts), 1)
        self.assertEqual(len(self.mongodb.quizzes), 1)
        stored = self.mongodb.quizzes[0]
        self.assertEqual(stored["quiz_id"], quiz.quiz_id)
        self.assertEqual(stored["topic"], "Rivers")
        self.assertEqual(stored["tags"], ["geo", "water"])
        self.assertTrue(stored["is_public"])
        self.assertEqual(stored["prompt_ref"], self.mongodb.prompts[0]["prompt_id"])
        self.assertEqual(len(stored["questions"]), 3)

    async def test_defaults_fill_missing_fields(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(5)))

        quiz = await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Rivers"))

        self.assertEqual(quiz.difficulty, "medium")
        self.assertEqual(quiz.quiz_type, "multiple-choice")
        self.assertTrue(quiz.time_limit)
        prompt = self.llm.generate_text.call_args.args[0]
        self.assertIn("Generate 5 medium level multiple-choice", prompt)
        self.assertEqual(self.mongodb.prompts[0]["number_of_questions"], 5)

    async def test_mixed_quiz_types_match_options(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(4, "mixed")))

        quiz = await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Space", quiz_type="mixed"))

        for question in quiz.questions:
            self.assertEqual(question.type == "true-false", len(question.options) == 2)
        self.assertEqual([q.type for q in quiz.questions],
                         ["multiple-choice", "true-false", "multiple-choice", "true-false"])

    async def test_empty_result_is_an_error_and_stores_nothing(self):
        generator = self._generator("Here you go: []")

        with self.assertRaises(UpstreamError) as ctx:
            await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Rivers"))

        self.assertEqual(ctx.exception.message, "Quiz generation returned no questions")
        self.assertEqual(self.mongodb.quizzes, [])
        self.assertEqual(self.mongodb.prompts, [])

    async def test_unparseable_reply_stores_nothing(self):
        generator = self._generator("no quiz today")

        with self.assertRaises(UpstreamError):
            await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Rivers"))

        self.assertEqual(self.mongodb.quizzes, [])
        self.assertEqual(self.mongodb.prompts, [])

    async def test_upstream_failure_stores_nothing(self):
        generator = self._generator("")
        self.llm.generate_text.side_effect = UpstreamError("Quiz generation timed out")

        with self.assertRaises(UpstreamError):
            await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Rivers"))

        self.assertEqual(self.mongodb.quizzes, [])
        self.assertEqual(self.mongodb.prompts, [])

    async def test_failed_quiz_insert_removes_the_request_record(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(2)))

        with patch.object(self.mongodb, "insert_quiz", side_effect=InternalError("Failed to save quiz")):
            with self.assertRaises(InternalError):
                await generator.generate_quiz("user-1", QuizGenerationRequest(topic="Rivers"))

        self.assertEqual(self.mongodb.prompts, [])
        self.assertEqual(self.mongodb.quizzes, [])

    async def test_invalid_requests_never_reach_the_llm(self):
        generator = self._generator(SampleData.llm_reply(SampleData.generated_questions(1)))
        cases = [
            (QuizGenerationRequest(), "Topic is required"),
            (QuizGenerationRequest(topic="   "), "Topic is required"),
            (QuizGenerationRequest(topic="Rivers", difficulty="extreme"), "Invalid difficulty level"),
            (QuizGenerationRequest(topic="Rivers", number_of_questions=0), "Number of questions must be between 1 and 50"),
            (QuizGenerationRequest(topic="Rivers", number_of_questions=51), "Number of questions must be between 1 and 50"),
            (QuizGenerationRequest(topic="Rivers", quiz_type="essay"), "Invalid quiz type"),
        ]

        for request, message in cases:
            with self.subTest(message=message):
                with self.assertRaises(ValidationError) as ctx:
                    await generator.generate_quiz("user-1", request)
                self.assertEqual(ctx.exception.message, message)
                self.assertEqual(ctx.exception.status_code, 400)

        self.llm.generate_text.assert_not_called()
        self.assertEqual(self.mongodb.quizzes, [])


if __name__ == '__main__':
    unittest.main()
