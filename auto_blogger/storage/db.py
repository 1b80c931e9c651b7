"""MongoDB connection helpers."""
from datetime import datetime, timezone
from typing import Optional
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError
from auto_blogger.config.settings import DATABASE_SETTINGS
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

_client: Optional[MongoClient] = None


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_client(uri: Optional[str] = None) -> MongoClient:
    """Return the shared client, creating it on first use."""
    global _client
    if _client is None:
        _client = MongoClient(
            uri or DATABASE_SETTINGS['uri'],
            serverSelectionTimeoutMS=DATABASE_SETTINGS['server_selection_timeout_ms']
        )
    return _client


def get_database(client: Optional[MongoClient] = None) -> Database:
    client = client or get_client()
    return client[DATABASE_SETTINGS['database']]


def connect(uri: Optional[str] = None) -> Database:
    """Connect and verify the server responds to a ping.

    Raises:
        PyMongoError: If the server cannot be reached
    """
    client = get_client(uri)
    try:
        client.admin.command('ping')
    except PyMongoError as e:
        logger.error(f"MongoDB connection failed: {str(e)}")
        raise
    logger.info(f"Connected to MongoDB database '{DATABASE_SETTINGS['database']}'")
    return get_database(client)


def get_blog_collection(database: Optional[Database] = None) -> Collection:
    database = database if database is not None else get_database()
    return database[DATABASE_SETTINGS['blogs_collection']]


def get_subscriber_collection(database: Optional[Database] = None) -> Collection:
    database = database if database is not None else get_database()
    return database[DATABASE_SETTINGS['subscribers_collection']]


def ensure_indexes(blogs: Collection, subscribers: Optional[Collection] = None) -> None:
    """Create the indexes queries rely on. Safe to call repeatedly."""
    blogs.create_index([('status', ASCENDING), ('created_at', DESCENDING)])
    blogs.create_index('slug', unique=True)
    blogs.create_index('tags')
    blogs.create_index('category')
    blogs.create_index([('view_count', DESCENDING)])
    blogs.create_index([('created_at', DESCENDING)])

    if subscribers is not None:
        subscribers.create_index('email', unique=True)

    logger.debug("MongoDB indexes ensured")


def close() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")
