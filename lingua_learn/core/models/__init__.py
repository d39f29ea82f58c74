"""Pydantic I/O schemas shared by the API routers and the service layer."""
