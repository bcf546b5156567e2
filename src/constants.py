"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# =============================================================================
# Sessions
# =============================================================================
SESSION_COOKIE_NAME = "vidtube_session"
SESSION_TIMEOUT_DAYS = 10

# =============================================================================
# Cache TTLs (in seconds)
# =============================================================================
CACHE_TTL_STATS = 300  # 5 minutes

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
API_TIMEOUT_DEFAULT = 10.0
API_TIMEOUT_UPLOAD = 120.0  # Video uploads can be large

# =============================================================================
# Asset store
# =============================================================================
CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"
UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MiB
ASSET_UPLOAD_CHUNK_SIZE = 20 * 1024 * 1024  # Larger files go up in parts

# =============================================================================
# Field limits
# =============================================================================
USERNAME_MAX_LENGTH = 50
TITLE_MAX_LENGTH = 200
PASSWORD_MIN_LENGTH = 8
