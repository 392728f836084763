"""
ditup_api.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories stay thin: one query per operation; authorization and validation
# happen in the API layer before a repository is called.
