"""
notes_api: REST backend for users and their notes.

Layers (outermost first): api -> services -> repositories -> models/database.
Failures raised anywhere below the API are turned into client-safe errors by
`notes_api.exceptions.classifier`.
"""

__all__: list[str] = []
