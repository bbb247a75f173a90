import os

ENVIRONMENT = "production"

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

APOLOGY_BACKEND = os.getenv("APOLOGY_BACKEND", "http")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "apology_db"),
}

API_BASE_URL = os.getenv("API_BASE_URL", "https://attendance-eslamrazeen-eslam-razeens-projects.vercel.app/api")
API_TOKEN = os.getenv("API_TOKEN", "")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

IMAGE_BASE_URL = os.getenv("IMAGE_BASE_URL", "https://attendance-eslamrazeen-eslam-razeens-projects.vercel.app/")
PLACEHOLDER_IMAGE_URL = os.getenv("PLACEHOLDER_IMAGE_URL", "/static/img/attachment-placeholder.png")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
