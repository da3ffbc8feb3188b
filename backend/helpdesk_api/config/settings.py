import logging
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

logging.basicConfig(level=logging.INFO)

load_dotenv()

# Extension token settings
EXTENSION_TOKEN_PREFIX = "hdx_"
EXTENSION_TOKEN_TTL_MINUTES = int(os.getenv("EXTENSION_TOKEN_TTL_MINUTES", "60"))
# When true every 401 from /extension/validate says "Invalid token"
EXTENSION_TOKEN_UNIFORM_ERRORS = os.getenv("EXTENSION_TOKEN_UNIFORM_ERRORS", "false").lower() == "true"
EXTENSION_TOKEN_PURGE_INTERVAL_HOURS = int(os.getenv("EXTENSION_TOKEN_PURGE_INTERVAL_HOURS", "24"))

if EXTENSION_TOKEN_TTL_MINUTES <= 0:
    raise ValueError("EXTENSION_TOKEN_TTL_MINUTES must be a positive number of minutes")

# Web session (primary login) settings
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "__session")

# Database Pool settings
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))
DB_POOL_PRE_PING = os.getenv("DB_POOL_PRE_PING", "true").lower() == "true"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))

# -------------------------
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL and not DB_HOST:
    # No cloud credentials: run against a local SQLite file
    DATABASE_URL = "sqlite+aiosqlite:///./helpdesk.db"
elif not DATABASE_URL:
    DATABASE_URL = f"mysql+aiomysql://{DB_USER}:{quote_plus(DB_PASSWORD or '')}@{DB_HOST}:{DB_PORT}/{DB_NAME}"

# Web push (VAPID). Sending is disabled until the private key and claim email are set.
VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY", "")
VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY", "")
VAPID_CLAIM_EMAIL = os.getenv("VAPID_CLAIM_EMAIL", "")
