"""Internal constants shared across the library."""

USER_AGENT = "pysprintpoker"

SESSIONS_ENDPOINT = "/sessions"
USERS_ENDPOINT = "/users"
STORIES_ENDPOINT = "/stories"
VOTES_ENDPOINT = "/votes"
