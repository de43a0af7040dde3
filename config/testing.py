import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "committee_shifts_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ORG_TIMEZONE = ""

VAPID_PUBLIC_KEY = "test-public-key"
VAPID_PRIVATE_KEY = ""
VAPID_SUBJECT = "mailto:test@example.org"

REMINDER_TOLERANCE_SECONDS = 30
DEDUP_TTL_SECONDS = 3600

START_NOTIFIER = False

AUTO_INIT_DB = False
AUTO_SEED_DB = False
