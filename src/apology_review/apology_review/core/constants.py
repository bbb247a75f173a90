"""Constants and defaults.

Note: Keep constants here to avoid magic values spread across code.
"""

DEFAULT_IMAGE_BASE_URL = "https://attendance-eslamrazeen-eslam-razeens-projects.vercel.app/"
DEFAULT_PLACEHOLDER_IMAGE_URL = "/static/img/attachment-placeholder.png"

STATUS_FILTER_ALL = "all"
SCOPE_FILTER_ALL = "all"

# Department codes offered on the staff review page.
DEPARTMENTS = ("CS", "IS", "AI", "BIO")

DEFAULT_FETCH_LIMIT = 500
DEFAULT_HTTP_TIMEOUT = 10.0

DISPLAY_TIMESTAMP_FORMAT = "%b %d, %Y at %I:%M %p"
