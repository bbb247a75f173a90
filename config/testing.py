import os

ENVIRONMENT = "testing"

SECRET_KEY = "test-secret"

APOLOGY_BACKEND = os.getenv("APOLOGY_BACKEND", "http")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "apology_db_test"),
}

API_BASE_URL = os.getenv("API_BASE_URL", "http://apologies.test/api")
API_TOKEN = ""
HTTP_TIMEOUT = 2.0

IMAGE_BASE_URL = "https://cdn.example.test/"
PLACEHOLDER_IMAGE_URL = "/static/img/attachment-placeholder.png"

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
