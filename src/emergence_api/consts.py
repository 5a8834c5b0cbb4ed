"""High-value constants for the Emergence API package."""

# Package metadata
PACKAGE_VERSION = "0.3.0"
SERVER_NAME = "emergence-api"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
PRODUCTION_BASE_URL = "https://api.artsy.net"
STAGING_BASE_URL = "https://stagingapi.artsy.net"
XAPP_TOKEN_HEADER = "X-Xapp-Token"
XAPP_TOKEN_PATH = "/api/v1/xapp_token"
SHOWS_PATH = "/api/v1/shows"
FEATURED_SET_ID = "530ebe92139b21efd6000071"

# Persisted token keys
TOKEN_KEY = "TokenKey"
TOKEN_EXPIRY_KEY = "TokenExpiry"

# Business logic consts
NEAR_LOCATION_PAGE_SIZE = 5
ARTWORKS_PAGE_SIZE = 10
