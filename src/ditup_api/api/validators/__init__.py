"""
ditup_api.api.validators

Request validation.

Responsibilities:
- Pydantic models for incoming JSON:API documents (shape, types, lengths, grammar).
- Explicit check functions for rules that span fields, the URL or the caller;
  they raise `ValidationFailed` with every problem found.
"""

# Package marker; validators are imported directly from submodules.
