"""
Health Check Endpoints.

Basic status endpoints (health, version) used by load balancers and
deployment checks. They sit outside the response envelope.
"""

from fastapi import APIRouter

from lingua_learn.server.core import constant

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "healthy"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """Return the API version and the schema version of the payloads."""
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}
