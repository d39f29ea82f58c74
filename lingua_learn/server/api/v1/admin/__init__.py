"""Admin-only routers mounted under ``/api/admin``."""
