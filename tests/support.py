"""API keys and headers shared by the test modules."""

ADMIN_KEY = "test-admin-key"
USER_KEY = "test-user-key"
ADMIN = {"X-API-KEY": ADMIN_KEY}
USER = {"X-API-KEY": USER_KEY}
