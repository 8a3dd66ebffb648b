import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))
APP_ENV = os.getenv("APP_ENV", "development")
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# Unset means a single process with the in-memory room registry
REDIS_URL = os.getenv("REDIS_URL", None)

STATIC_DIR = os.getenv(
    "STATIC_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "dist"),
)

ROOM_ID_LENGTH = int(os.getenv("ROOM_ID_LENGTH", 6))
ROOM_ID_MAX_ATTEMPTS = int(os.getenv("ROOM_ID_MAX_ATTEMPTS", 10))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "https://localhost:5173",
    "https://localhost:3000",
    FRONTEND_URL,
    "http://sender.rajb.tech",
    "https://sender.rajb.tech",
]

# Matched against the whole Origin header
ALLOWED_ORIGIN_PATTERNS = [
    r".*\.rajb\.tech",
    r".*\.netlify\.app",
    r".*\.vercel\.app",
    r".*\.coolify\.app",
    r".*localhost:\d+",
]

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
