"""
ditup_api.api.routers

One router module per resource; each is mounted in `api.app.create_app`.
"""
