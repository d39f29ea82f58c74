"""Lingua Learn.

Backend service for a language-learning platform.

High-level architecture
-----------------------

- ``lingua_learn.core``: logging, monitoring, security helpers, the SQLModel
  entities and the Pydantic I/O schemas.
- ``lingua_learn.server``: the FastAPI application, routers, exception
  handlers, middleware and the service layer that owns ordering, progress,
  scoring, audio processing, media storage and auditing.

Content is organised as learning paths made of units, units of lessons,
lessons of sections and sections of exercises. Learners record attempts and
progress against that tree; admins author it through the same API.
"""

__version__ = "1.0.0"
