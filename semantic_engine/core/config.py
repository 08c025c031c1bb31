import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


# Embedding provider
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "").strip()
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "1536"))
EMBEDDING_TIMEOUT_SECONDS = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "20"))
# Raise instead of falling back when a configured provider fails
EMBEDDING_STRICT = _env_flag("EMBEDDING_STRICT")

# Bump whenever the compiled profile text format changes
FINGERPRINT_VERSION = "v1"

# Batch pacing (seconds between users)
VECTOR_BATCH_DELAY_SECONDS = float(os.getenv("VECTOR_BATCH_DELAY_SECONDS", "0.1"))

# Mongo / Redis
_is_docker = os.getenv("DOCKER_CONTAINER") or os.path.exists("/.dockerenv")
MONGO_URI = os.getenv("MONGO_URI", "").strip() or (
    "mongodb://mongo:27017" if _is_docker else "mongodb://localhost:27017"
)
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "dating_app")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def openai_key_configured(api_key: str = None) -> bool:
    """True when the key looks like a real OpenAI key (not empty, not a placeholder)."""
    key = OPENAI_API_KEY if api_key is None else api_key
    if not key or key.startswith("sk-xxxxx") or len(key) < 20:
        return False
    return True
