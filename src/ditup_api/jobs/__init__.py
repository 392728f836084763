"""
ditup_api.jobs

Periodic maintenance jobs run inside the service process.
"""
