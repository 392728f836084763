"""
ditup_api.api

API package for the ditup service.

Responsibilities:
- FastAPI app factory and router modules.
- JSON:API serialization, error envelopes and request validators.
- API-layer dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: validation + authorization + one repository call.
