"""
ditup_api.auth

Authentication/authorization package.

Responsibilities:
- Password hashing and HTTP Basic credential checks.
- Signed, expiring account codes (email verification, password reset).
- FastAPI auth dependencies (`Auth` + logged/self guards).
"""

# Package marker.
