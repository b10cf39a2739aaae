import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_admin_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "Yeka Michael Schools")
PAYMENT_DUE_DAYS = int(os.getenv("PAYMENT_DUE_DAYS", "7"))
PAYMENT_LINK_BASE_URL = os.getenv("PAYMENT_LINK_BASE_URL", "http://localhost:3000")
REGISTRATION_LOCK_TIMEOUT_SECONDS = int(os.getenv("REGISTRATION_LOCK_TIMEOUT_SECONDS", "15"))

# SMS is logged only unless SMS_ENABLED=1 and a gateway URL is set.
SMS_CONFIG = {
    "enabled": bool(int(os.getenv("SMS_ENABLED", "0"))),
    "base_url": os.getenv("SMS_BASE_URL", ""),
    "api_key": os.getenv("SMS_API_KEY", ""),
    "sender_id": os.getenv("SMS_SENDER_ID", ""),
    "timeout": float(os.getenv("SMS_TIMEOUT", "10")),
}
