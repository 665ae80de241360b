"""Internal constants shared across the library."""

BASE_URL = "http://localhost:5000"
API_PREFIX = "/api"
USER_AGENT = "pyraksha/1 (+offline-sync)"

# ------------------------------------------------------------------
# Local durable store
# ------------------------------------------------------------------

STORAGE_NAMESPACE = "raksha"
STORAGE_KEY = "offlineData"

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_MAX_AGE_SECONDS: float = 7 * 24 * 3600
DEFAULT_MAX_ITEMS_PER_BUCKET = 500

# ------------------------------------------------------------------
# Asset cache controller
# ------------------------------------------------------------------

CACHE_VERSION = "raksha-sahayak-v1"
ROOT_DOCUMENT = "/"
PRECACHE_URLS: tuple[str, ...] = (
    "/",
    "/tracking",
    "/reports",
    "/profile",
    "/authority",
    "/static/js/bundle.js",
    "/static/css/main.css",
    "/manifest.json",
)
SKIP_WAITING_MESSAGE = "SKIP_WAITING"
SYNC_OFFLINE_DATA_TAG = "sync-offline-data"

NOTIFICATION_ICON = "/icon-192x192.png"
NOTIFICATION_VIBRATE: tuple[int, ...] = (100, 50, 100)

# ------------------------------------------------------------------
# Emergency trigger
# ------------------------------------------------------------------

LONG_PRESS_SECONDS = 3.0
ACTIVATED_RESET_SECONDS = 5.0
LOCATION_UNAVAILABLE = "Location unavailable"

# ------------------------------------------------------------------
# Generative recommendations
# ------------------------------------------------------------------

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_REGION = "Maharashtra"
