"""
API I/O models.

Request bodies and response payloads for every router, grouped by domain.
"""
