"""
Application constants.

Static values shared by the application factory and routers.
"""

PROJECT_NAME = "Lingua Learn API"
VERSION = "1.0.0"
SCHEMA_VERSION = "v1"

API_PREFIX = "/api"
ADMIN_PREFIX = f"{API_PREFIX}/admin"

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100
