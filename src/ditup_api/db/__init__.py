"""
ditup_api.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models for the social graph (users, tags and the edges between them).
- Engine/session setup and repositories.
"""

# Package marker.
