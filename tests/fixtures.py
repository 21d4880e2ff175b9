"""
Test fixtures and sample data for the QuizHub tests.
"""
import copy
import json
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

from quizhub.models.schemas import new_id


class FakeMongoDBClient:
    """In-memory stand-in for MongoDBClient with the same method surface."""

    def __init__(self):
        self.quizzes: List[Dict[str, Any]] = []
        self.prompts: List[Dict[str, Any]] = []
        self.attempts: List[Dict[str, Any]] = []
        self.ratings: List[Dict[str, Any]] = []
        self.statistics: Dict[str, Dict[str, Any]] = {}
        self.saved: List[Dict[str, Any]] = []
        self.searches: Dict[str, Dict[str, Any]] = {}
        self.users: Dict[str, str] = {}
        self.calls = Counter()
        self.closed = False

    def close(self):
        self.closed = True

    # Quizzes

    def save_quiz_prompt(self, prompt_data):
        self.prompts.append(copy.deepcopy(prompt_data))

    def delete_quiz_prompt(self, prompt_id):
        self.prompts = [p for p in self.prompts if p["prompt_id"] != prompt_id]

    def insert_quiz(self, quiz_data):
        self.quizzes.append(copy.deepcopy(quiz_data))

    def get_quiz(self, quiz_id):
        for quiz in self.quizzes:
            if quiz["quiz_id"] == quiz_id:
                return copy.deepcopy(quiz)
        return None

    def get_quizzes_by_ids(self, quiz_ids):
        return [copy.deepcopy(q) for q in self.quizzes if q["quiz_id"] in quiz_ids]

    def get_user_quizzes(self, user_id):
        return self._newest_first(q for q in self.quizzes if q["created_by"] == user_id)

    def count_user_quizzes(self, user_id, since=None):
        return len([
            q for q in self.quizzes
            if q["created_by"] == user_id and (since is None or q["created_at"] >= since)
        ])

    def find_public_quizzes(self, exclude_ids=None, exclude_creator=None, topics=None, difficulties=None, limit=None):
        self.calls["find_public_quizzes"] += 1
        found = [
            q for q in self.quizzes
            if q["is_public"]
            and q["quiz_id"] not in (exclude_ids or [])
            and (exclude_creator is None or q["created_by"] != exclude_creator)
            and (not topics or q["topic"] in topics)
            and (not difficulties or q["difficulty"] in difficulties)
        ]
        found = self._newest_first(found)
        return found[:limit] if limit else found

    def search_public_quizzes(self, search=None, category=None, difficulty=None):
        def matches(quiz):
            fields = []
            if search:
                needle = search.lower()
                fields += [(quiz["topic"], needle), (quiz.get("description") or "", needle)]
                fields += [(tag, needle) for tag in quiz.get("tags", [])]
            if category:
                needle = category.lower()
                fields += [(quiz["topic"], needle)] + [(tag, needle) for tag in quiz.get("tags", [])]
            if not fields:
                return True
            return any(needle in value.lower() for value, needle in fields)

        return self._newest_first(
            q for q in self.quizzes
            if q["is_public"] and matches(q) and (not difficulty or q["difficulty"] == difficulty)
        )

    # Attempts

    def insert_attempt(self, attempt_data):
        self.attempts.append(copy.deepcopy(attempt_data))

    def get_attempt(self, attempt_id):
        for attempt in self.attempts:
            if attempt["attempt_id"] == attempt_id:
                return copy.deepcopy(attempt)
        return None

    def get_user_attempts(self, user_id, since=None, limit=None, newest_first=False):
        found = sorted(
            (copy.deepcopy(a) for a in self.attempts
             if a["user_id"] == user_id and (since is None or a["created_at"] >= since)),
            key=lambda a: a["created_at"],
            reverse=newest_first,
        )
        return found[:limit] if limit else found

    def count_quiz_attempters(self, quiz_id):
        return len({a["user_id"] for a in self.attempts if a["quiz_id"] == quiz_id})

    # Ratings

    def upsert_rating(self, user_id, quiz_id, rating):
        for row in self.ratings:
            if row["user_id"] == user_id and row["quiz_id"] == quiz_id:
                row["rating"] = rating
                row["updated_at"] = datetime.now()
                return copy.deepcopy(row)
        row = {"user_id": user_id, "quiz_id": quiz_id, "rating": rating, "updated_at": datetime.now()}
        self.ratings.append(row)
        return copy.deepcopy(row)

    def get_user_rating(self, user_id, quiz_id):
        for row in self.ratings:
            if row["user_id"] == user_id and row["quiz_id"] == quiz_id:
                return copy.deepcopy(row)
        return None

    def get_quiz_ratings(self, quiz_id):
        return [copy.deepcopy(r) for r in self.ratings if r["quiz_id"] == quiz_id]

    def get_ratings_for_quizzes(self, quiz_ids):
        self.calls["get_ratings_for_quizzes"] += 1
        return [copy.deepcopy(r) for r in self.ratings if r["quiz_id"] in quiz_ids]

    # Statistics

    def upsert_statistics(self, user_id, statistics):
        self.statistics.setdefault(user_id, {}).update(copy.deepcopy(statistics))

    # Saved quizzes

    def insert_saved_quiz(self, user_id, quiz_id):
        if any(s["user_id"] == user_id and s["quiz_id"] == quiz_id for s in self.saved):
            return False
        self.saved.append({"user_id": user_id, "quiz_id": quiz_id, "created_at": datetime.now()})
        return True

    def delete_saved_quiz(self, user_id, quiz_id):
        before = len(self.saved)
        self.saved = [s for s in self.saved if not (s["user_id"] == user_id and s["quiz_id"] == quiz_id)]
        return len(self.saved) < before

    def get_saved_quiz_ids(self, user_id):
        return [s["quiz_id"] for s in reversed(self.saved) if s["user_id"] == user_id]

    # Search queries

    def track_search_query(self, query):
        entry = self.searches.setdefault(query, {"query": query, "count": 0})
        entry["count"] += 1
        entry["last_searched"] = datetime.now()

    def get_popular_search_queries(self, limit=10):
        ranked = sorted(self.searches.values(), key=lambda e: (e["count"], e["last_searched"]), reverse=True)
        return [{"query": e["query"], "count": e["count"]} for e in ranked[:limit]]

    # Users

    def get_user_names(self, user_ids):
        return {user_id: self.users[user_id] for user_id in user_ids if user_id in self.users}

    @staticmethod
    def _newest_first(quizzes):
        return sorted((copy.deepcopy(q) for q in quizzes), key=lambda q: q["created_at"], reverse=True)


class SampleData:
    """Sample documents and LLM replies shared by the test modules."""

    BASE_TIME = datetime(2024, 5, 15, 12, 0, 0)

    @staticmethod
    def question(text: str, options: List[str], answer: str, qtype: str = "multiple-choice", question_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "question_id": question_id or new_id(),
            "question_text": text,
            "options": options,
            "correct_answer": answer,
            "explanation": f"Because {answer}.",
            "type": qtype,
        }

    @staticmethod
    def quiz(
        created_by: str = "author-1",
        topic: str = "Geography",
        difficulty: str = "medium",
        is_public: bool = True,
        created_at: Optional[datetime] = None,
        questions: Optional[List[Dict[str, Any]]] = None,
        quiz_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if questions is None:
            questions = [
                SampleData.question("Capital of France?", ["Paris", "Rome", "Madrid", "Berlin"], "Paris", question_id="q1"),
                SampleData.question("Capital of Italy?", ["Paris", "Rome", "Madrid", "Berlin"], "Rome", question_id="q2"),
                SampleData.question("Madrid is in Spain.", ["True", "False"], "True", "true-false", question_id="q3"),
            ]
        return {
            "quiz_id": quiz_id or new_id(),
            "topic": topic,
            "description": description,
            "quiz_type": "multiple-choice",
            "difficulty": difficulty,
            "is_public": is_public,
            "time_limit": True,
            "questions": questions,
            "tags": tags or [],
            "prompt_ref": None,
            "created_by": created_by,
            "created_at": created_at or SampleData.BASE_TIME,
        }

    @staticmethod
    def attempt(user_id: str, quiz_id: str, score: int, answered: int, time_taken: Any = 60, created_at: Optional[datetime] = None) -> Dict[str, Any]:
        answers = [
            {
                "question_id": f"q{i + 1}",
                "selected_answer": "x",
                "is_correct": i < score,
                "correct_answer": "x",
                "explanation": "",
            }
            for i in range(answered)
        ]
        return {
            "attempt_id": new_id(),
            "user_id": user_id,
            "quiz_id": quiz_id,
            "answers": answers,
            "score": score,
            "time_taken": time_taken,
            "created_at": created_at or SampleData.BASE_TIME,
        }

    @staticmethod
    def generated_questions(count: int, quiz_type: str = "multiple-choice") -> List[Dict[str, Any]]:
        questions = []
        for i in range(count):
            if quiz_type == "true-false" or (quiz_type == "mixed" and i % 2):
                options = ["True", "False"]
                answer = "True" if i % 2 == 0 else "False"
            else:
                options = [f"Option {i}-{n}" for n in range(4)]
                answer = options[1]
            questions.append({
                "questionText": f"Question {i + 1}?",
                "options": options,
                "correctAnswer": answer,
                "explanation": f"Explanation {i + 1}",
            })
        return questions

    @staticmethod
    def llm_reply(questions: List[Dict[str, Any]]) -> str:
        """A reply wrapped in the kind of prose and code fence the model adds."""
        return "Here is your quiz:\n```json\n" + json.dumps(questions, indent=2) + "\n```\nGood luck!"

    @staticmethod
    def fake_llm(reply: str) -> AsyncMock:
        llm = AsyncMock()
        llm.generate_text.return_value = reply
        return llm

    @staticmethod
    def days_ago(days: int, hours: int = 0) -> datetime:
        return SampleData.BASE_TIME - timedelta(days=days, hours=hours)
