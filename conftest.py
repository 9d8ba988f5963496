import os

from dotenv import load_dotenv

# Load .env.test if present, then fall back to an in-memory SQLite database.
# MUST run before anything imports libs.common.config (settings are cached).
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")
