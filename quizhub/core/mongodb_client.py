from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from typing import List, Dict, Any, Optional
import logging
import re
from datetime import datetime
from quizhub.config import Config
from quizhub.core.errors import InternalError

logger = logging.getLogger(__name__)

class MongoDBClient:
    """
    MongoDB client for the quiz platform.

    Owns every collection the quiz services read and write: quizzes and their
    generation requests, attempts, ratings, the per-user statistics cache,
    saved quizzes and tracked search queries. Documents carry their own string
    ids and are always read without the Mongo `_id`.

    Driver failures are logged and re-raised as InternalError.
    """
    def __init__(self, uri: Optional[str] = None, database_name: Optional[str] = None, client=None, database=None):
        self.client = client if client is not None else MongoClient(uri or Config.MONGODB_URI)
        self.db = database if database is not None else self.client[database_name or Config.DATABASE_NAME]
        self.quiz_collection = self.db[Config.QUIZ_COLLECTION]
        self.prompt_collection = self.db[Config.PROMPT_COLLECTION]
        self.attempt_collection = self.db[Config.ATTEMPT_COLLECTION]
        self.rating_collection = self.db[Config.RATING_COLLECTION]
        self.statistics_collection = self.db[Config.STATISTICS_COLLECTION]
        self.saved_collection = self.db[Config.SAVED_QUIZ_COLLECTION]
        self.search_collection = self.db[Config.SEARCH_QUERY_COLLECTION]
        self.user_collection = self.db[Config.USER_COLLECTION]
        self._ensure_indexes()

    def _ensure_indexes(self):
        """Ensure lookup, uniqueness and text indexes exist"""
        try:
            self.quiz_collection.create_index("quiz_id", unique=True)
            self.quiz_collection.create_index([("is_public", ASCENDING), ("created_at", DESCENDING)])
            self.quiz_collection.create_index("created_by")
            self.quiz_collection.create_index([("topic", "text"), ("description", "text")])
            self.attempt_collection.create_index("attempt_id", unique=True)
            self.attempt_collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
            self.attempt_collection.create_index("quiz_id")
            # One rating and one bookmark per (user, quiz)
            self.rating_collection.create_index([("user_id", ASCENDING), ("quiz_id", ASCENDING)], unique=True)
            self.saved_collection.create_index([("user_id", ASCENDING), ("quiz_id", ASCENDING)], unique=True)
            self.statistics_collection.create_index("user_id", unique=True)
            self.search_collection.create_index("query", unique=True)
        except PyMongoError as e:
            logger.warning(f"Could not create indexes: {e}")

    def close(self):
        self.client.close()

    # Quizzes

    def save_quiz_prompt(self, prompt_data: Dict[str, Any]) -> None:
        try:
            self.prompt_collection.insert_one(dict(prompt_data))
        except PyMongoError as e:
            logger.error(f"Error saving quiz prompt: {e}")
            raise InternalError("Failed to save quiz prompt")

    def delete_quiz_prompt(self, prompt_id: str) -> None:
        try:
            self.prompt_collection.delete_one({"prompt_id": prompt_id})
        except PyMongoError as e:
            logger.error(f"Error removing quiz prompt {prompt_id}: {e}")
            raise InternalError("Failed to remove quiz prompt")

    def insert_quiz(self, quiz_data: Dict[str, Any]) -> None:
        try:
            # insert_one adds `_id` to the dict it is given
            self.quiz_collection.insert_one(dict(quiz_data))
            logger.info(f"Saved quiz: {quiz_data['quiz_id']}")
        except PyMongoError as e:
            logger.error(f"Error saving quiz: {e}")
            raise InternalError("Failed to save quiz")

    def get_quiz(self, quiz_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.quiz_collection.find_one({"quiz_id": quiz_id}, {"_id": 0})
        except PyMongoError as e:
            logger.error(f"Error fetching quiz {quiz_id}: {e}")
            raise InternalError("Failed to fetch quiz")

    def get_quizzes_by_ids(self, quiz_ids: List[str]) -> List[Dict[str, Any]]:
        try:
            return list(self.quiz_collection.find({"quiz_id": {"$in": list(quiz_ids)}}, {"_id": 0}))
        except PyMongoError as e:
            logger.error(f"Error fetching quizzes by id: {e}")
            raise InternalError("Failed to fetch quizzes")

    def get_user_quizzes(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            cursor = self.quiz_collection.find({"created_by": user_id}, {"_id": 0}).sort("created_at", DESCENDING)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error fetching quizzes of user {user_id}: {e}")
            raise InternalError("Failed to fetch user quizzes")

    def count_user_quizzes(self, user_id: str, since: Optional[datetime] = None) -> int:
        query: Dict[str, Any] = {"created_by": user_id}
        if since is not None:
            query["created_at"] = {"$gte": since}
        try:
            return self.quiz_collection.count_documents(query)
        except PyMongoError as e:
            logger.error(f"Error counting quizzes of user {user_id}: {e}")
            raise InternalError("Failed to count user quizzes")

    def find_public_quizzes(
        self,
        exclude_ids: Optional[List[str]] = None,
        exclude_creator: Optional[str] = None,
        topics: Optional[List[str]] = None,
        difficulties: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Public quizzes, newest first.

        Empty `topics` / `difficulties` lists mean no narrowing on that field.
        """
        query: Dict[str, Any] = {"is_public": True}
        if exclude_ids:
            query["quiz_id"] = {"$nin": list(exclude_ids)}
        if exclude_creator is not None:
            query["created_by"] = {"$ne": exclude_creator}
        if topics:
            query["topic"] = {"$in": list(topics)}
        if difficulties:
            query["difficulty"] = {"$in": list(difficulties)}

        try:
            cursor = self.quiz_collection.find(query, {"_id": 0}).sort("created_at", DESCENDING)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error fetching public quizzes: {e}")
            raise InternalError("Failed to fetch public quizzes")

    def search_public_quizzes(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Catalogue search over public quizzes, newest first.

        `search` matches topic, description or tags; `category` matches topic
        or tags. Both are case-insensitive substring matches.
        """
        query: Dict[str, Any] = {"is_public": True}
        alternatives = []
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            alternatives += [{"topic": pattern}, {"description": pattern}, {"tags": pattern}]
        if category:
            pattern = {"$regex": re.escape(category), "$options": "i"}
            alternatives += [{"topic": pattern}, {"tags": pattern}]
        if alternatives:
            query["$or"] = alternatives
        if difficulty:
            query["difficulty"] = difficulty

        try:
            cursor = self.quiz_collection.find(query, {"_id": 0}).sort("created_at", DESCENDING)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error searching public quizzes: {e}")
            raise InternalError("Failed to search quizzes")

    # Attempts

    def insert_attempt(self, attempt_data: Dict[str, Any]) -> None:
        try:
            self.attempt_collection.insert_one(dict(attempt_data))
            logger.info(f"Saved attempt {attempt_data['attempt_id']} for quiz {attempt_data['quiz_id']}")
        except PyMongoError as e:
            logger.error(f"Error saving attempt: {e}")
            raise InternalError("Failed to save quiz attempt")

    def get_attempt(self, attempt_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.attempt_collection.find_one({"attempt_id": attempt_id}, {"_id": 0})
        except PyMongoError as e:
            logger.error(f"Error fetching attempt {attempt_id}: {e}")
            raise InternalError("Failed to fetch quiz attempt")

    def get_user_attempts(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"user_id": user_id}
        if since is not None:
            query["created_at"] = {"$gte": since}
        try:
            cursor = self.attempt_collection.find(query, {"_id": 0}).sort(
                "created_at", DESCENDING if newest_first else ASCENDING
            )
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error fetching attempts of user {user_id}: {e}")
            raise InternalError("Failed to fetch quiz attempts")

    def count_quiz_attempters(self, quiz_id: str) -> int:
        """Number of distinct users who attempted the quiz."""
        try:
            return len(self.attempt_collection.distinct("user_id", {"quiz_id": quiz_id}))
        except PyMongoError as e:
            logger.error(f"Error counting attempts of quiz {quiz_id}: {e}")
            raise InternalError("Failed to count quiz attempts")

    # Ratings

    def upsert_rating(self, user_id: str, quiz_id: str, rating: int) -> Dict[str, Any]:
        """Insert or overwrite the user's rating of a quiz in a single atomic write."""
        key = {"user_id": user_id, "quiz_id": quiz_id}
        update = {
            "$set": {"rating": rating, "updated_at": datetime.now()},
            "$setOnInsert": {"created_at": datetime.now()},
        }
        try:
            try:
                document = self.rating_collection.find_one_and_update(
                    key, update, projection={"_id": 0}, upsert=True, return_document=ReturnDocument.AFTER
                )
            except DuplicateKeyError:
                # A concurrent first rating won the insert; the row exists now
                document = self.rating_collection.find_one_and_update(
                    key, update, projection={"_id": 0}, return_document=ReturnDocument.AFTER
                )
            logger.info(f"Saved rating {rating} of user {user_id} for quiz {quiz_id}")
            return document
        except PyMongoError as e:
            logger.error(f"Error saving rating: {e}")
            raise InternalError("Failed to save rating")

    def get_user_rating(self, user_id: str, quiz_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.rating_collection.find_one({"user_id": user_id, "quiz_id": quiz_id}, {"_id": 0})
        except PyMongoError as e:
            logger.error(f"Error fetching rating: {e}")
            raise InternalError("Failed to fetch rating")

    def get_quiz_ratings(self, quiz_id: str) -> List[Dict[str, Any]]:
        try:
            return list(self.rating_collection.find({"quiz_id": quiz_id}, {"_id": 0}))
        except PyMongoError as e:
            logger.error(f"Error fetching ratings of quiz {quiz_id}: {e}")
            raise InternalError("Failed to fetch ratings")

    def get_ratings_for_quizzes(self, quiz_ids: List[str]) -> List[Dict[str, Any]]:
        try:
            return list(self.rating_collection.find({"quiz_id": {"$in": list(quiz_ids)}}, {"_id": 0}))
        except PyMongoError as e:
            logger.error(f"Error fetching ratings: {e}")
            raise InternalError("Failed to fetch ratings")

    # Statistics cache

    def upsert_statistics(self, user_id: str, statistics: Dict[str, Any]) -> None:
        try:
            self.statistics_collection.update_one(
                {"user_id": user_id},
                {
                    "$set": {**statistics, "updated_at": datetime.now()},
                    "$setOnInsert": {"created_at": datetime.now()},
                },
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"Error saving statistics of user {user_id}: {e}")
            raise InternalError("Failed to save statistics")

    # Saved quizzes

    def insert_saved_quiz(self, user_id: str, quiz_id: str) -> bool:
        """Returns False when the quiz was already saved by the user."""
        try:
            self.saved_collection.insert_one({"user_id": user_id, "quiz_id": quiz_id, "created_at": datetime.now()})
            return True
        except DuplicateKeyError:
            return False
        except PyMongoError as e:
            logger.error(f"Error saving quiz bookmark: {e}")
            raise InternalError("Failed to save quiz")

    def delete_saved_quiz(self, user_id: str, quiz_id: str) -> bool:
        try:
            result = self.saved_collection.delete_one({"user_id": user_id, "quiz_id": quiz_id})
            return result.deleted_count > 0
        except PyMongoError as e:
            logger.error(f"Error removing quiz bookmark: {e}")
            raise InternalError("Failed to remove saved quiz")

    def get_saved_quiz_ids(self, user_id: str) -> List[str]:
        try:
            cursor = self.saved_collection.find({"user_id": user_id}, {"_id": 0}).sort("created_at", DESCENDING)
            return [saved["quiz_id"] for saved in cursor]
        except PyMongoError as e:
            logger.error(f"Error fetching saved quizzes of user {user_id}: {e}")
            raise InternalError("Failed to fetch saved quizzes")

    # Search queries

    def track_search_query(self, query: str) -> None:
        try:
            self.search_collection.update_one(
                {"query": query},
                {"$inc": {"count": 1}, "$set": {"last_searched": datetime.now()}},
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"Error tracking search query: {e}")
            raise InternalError("Failed to track search query")

    def get_popular_search_queries(self, limit: int = 10) -> List[Dict[str, Any]]:
        try:
            cursor = self.search_collection.find({}, {"_id": 0, "query": 1, "count": 1}).sort(
                [("count", DESCENDING), ("last_searched", DESCENDING)]
            ).limit(limit)
            return list(cursor)
        except PyMongoError as e:
            logger.error(f"Error fetching popular search queries: {e}")
            raise InternalError("Failed to fetch popular search queries")

    # Users (owned by the auth service, read-only here)

    def get_user_names(self, user_ids: List[str]) -> Dict[str, str]:
        ids = list({user_id for user_id in user_ids if user_id})
        if not ids:
            return {}
        try:
            cursor = self.user_collection.find({"user_id": {"$in": ids}}, {"_id": 0, "user_id": 1, "username": 1})
            return {user["user_id"]: user.get("username") for user in cursor if user.get("username")}
        except PyMongoError as e:
            logger.error(f"Error fetching user names: {e}")
            raise InternalError("Failed to fetch user names")
