"""
Lingua Learn Server Package.

This package contains the web server implementation for the Lingua Learn platform.
It includes the API definition, exception handlers, middleware, business services
and configuration.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration settings and constants.
    exception_handlers: Error-to-response mapping.
    middleware: Request tracing middleware.
    services: Business logic and service layer.
"""
