from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError
from pymongo.database import Database as MongoDatabase
from typing import Optional
import logging

from .models.category import CATEGORY_SEED

logger = logging.getLogger(__name__)


class Database:
    """Owns the process-wide MongoClient connection pool."""

    client: Optional[MongoClient] = None
    _db: Optional[MongoDatabase] = None

    def init_app(self, app, client=None):
        """Open the pool, verify connectivity, create indexes and seed categories."""
        try:
            if client is None:
                mongo_uri = app.config.get('MONGO_URI')
                if not mongo_uri:
                    error_msg = "MONGO_URI configuration is missing"
                    logger.error(error_msg)
                    raise ValueError(error_msg)

                client = MongoClient(
                    mongo_uri,
                    serverSelectionTimeoutMS=5000  # 5 second timeout
                )

            self.client = client
            self._db = self.client.get_database(app.config.get('MONGO_DB_NAME', 'newsroom'))

            try:
                self.client.admin.command('ping')
            except ConnectionFailure as e:
                error_msg = "Could not connect to MongoDB. Please ensure MongoDB is running and accessible."
                logger.error(error_msg)
                raise ConnectionError(error_msg) from e

            self.ensure_indexes()
            self.seed_categories()
            logger.info(f"Successfully connected to MongoDB database '{self._db.name}'")
            return True

        except PyMongoError as e:
            error_msg = f"Failed to initialise MongoDB: {e}"
            logger.error(error_msg)
            raise ConnectionError(error_msg) from e

    @property
    def db(self) -> Optional[MongoDatabase]:
        return self._db

    def ensure_indexes(self):
        self._db.articles.create_index([("published", ASCENDING), ("created_at", DESCENDING)])
        self._db.articles.create_index([("category", ASCENDING)])
        self._db.trending_topics.create_index([("trend_score", DESCENDING)])
        self._db.trending_topics.create_index([("fetched_at", ASCENDING)])
        self._db.categories.create_index([("slug", ASCENDING)], unique=True)

    def seed_categories(self):
        """Idempotent upsert of the fixed category reference data."""
        for category in CATEGORY_SEED:
            self._db.categories.update_one(
                {"slug": category["slug"]},
                {"$setOnInsert": category},
                upsert=True
            )

    def ping(self):
        if self.client is None:
            raise RuntimeError("Database not initialized")
        self.client.admin.command('ping')

    def close(self):
        """Close the database connection"""
        if self.client:
            self.client.close()
            self.client = None
            self._db = None
            logger.info("Database connection closed")
