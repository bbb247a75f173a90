import os

ENVIRONMENT = "development"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "mysql" reads the local apologies table, "http" talks to the apologies API
APOLOGY_BACKEND = os.getenv("APOLOGY_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "apology_db"),
}

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api")
API_TOKEN = os.getenv("API_TOKEN", "")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

IMAGE_BASE_URL = os.getenv("IMAGE_BASE_URL", "https://attendance-eslamrazeen-eslam-razeens-projects.vercel.app/")
PLACEHOLDER_IMAGE_URL = os.getenv("PLACEHOLDER_IMAGE_URL", "/static/img/attachment-placeholder.png")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo apologies on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
