"""
ditup_api.api.jsonapi

JSON:API media type support.
"""

from __future__ import annotations

from starlette.responses import JSONResponse

MEDIA_TYPE = "application/vnd.api+json"


class JsonApiResponse(JSONResponse):
    media_type = MEDIA_TYPE
