import os
from dotenv import load_dotenv

load_dotenv()

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

# --- Web Push (VAPID) ---
VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY", "")
VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY", "")
VAPID_SUBJECT = os.getenv("VAPID_SUBJECT", "mailto:admin@agnys.app")
PUSH_TTL_SECONDS = int(os.getenv("PUSH_TTL_SECONDS", "86400"))

# --- Notifications ---
NOTIFICATION_ICON = os.getenv("NOTIFICATION_ICON", "/icons/icon-192x192.png")
NOTIFICATION_BADGE = os.getenv("NOTIFICATION_BADGE", "/icons/badge-72x72.png")
DASHBOARD_URL = os.getenv("DASHBOARD_URL", "/dashboard")

# Shared secret for scheduler-invoked endpoints. Empty means open.
CRON_SECRET = os.getenv("CRON_SECRET", "")

# --- Locale ---
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")
APP_LANGUAGE = os.getenv("APP_LANGUAGE", "es")  # es / en

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
