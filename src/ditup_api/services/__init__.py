"""
ditup_api.services

Service layer.

Responsibilities:
- Side effects that are not database queries (mail delivery).
"""

# Package marker.
