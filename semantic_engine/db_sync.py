from pymongo import MongoClient
import logging

from semantic_engine.core.config import MONGO_URI, MONGO_DB_NAME

logger = logging.getLogger(__name__)

mongo_uri = MONGO_URI
db_name = MONGO_DB_NAME

USERS_COLLECTION = "users"
DAILY_PROMPTS_COLLECTION = "daily_prompts"
PROMPT_ANSWERS_COLLECTION = "prompt_answers"
PROFILE_EMBEDDINGS_COLLECTION = "profile_embeddings"

# Build connection options - only set directConnection for non-SRV connections
connection_options = {
    "serverSelectionTimeoutMS": 30000,
    "connectTimeoutMS": 30000,
    "socketTimeoutMS": 30000,
    "retryWrites": True,
    "retryReads": True,
    "maxPoolSize": 20,
    "maxIdleTimeMS": 45000,  # Close idle connections after 45 seconds
    "w": "majority",  # Embedding + fingerprint writes must not be lost on failover
    "readPreference": "primaryPreferred",
}

# SRV connections (mongodb+srv://) handle this automatically
if mongo_uri and not mongo_uri.startswith("mongodb+srv://"):
    connection_options["directConnection"] = False

_client = None


def get_db_client():
    """Return the process-wide MongoClient, creating it on first use."""
    global _client
    if _client is None:
        try:
            _client = MongoClient(mongo_uri, **connection_options)
        except Exception as e:
            logger.error(f"❌ Failed to create MongoDB client: {e}")
            raise
    return _client


def get_db():
    client = get_db_client()
    return client[db_name]


def close_db_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
