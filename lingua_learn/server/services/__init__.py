"""
Service layer.

Services own the business rules (ordering, publication guards, progress
roll-up, grading, audio timing, media storage, auditing) and work on an
``AsyncSession`` handed in by the router. Mutating service methods commit
once, so each request's writes land in a single transaction.
"""
