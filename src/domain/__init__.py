"""
Domain layer for email forwarding business logic.

This layer contains:
- Data models (type-safe structures)
- Business logic (SES record -> Discord message pipeline)
- Result types (explicit success/failure handling)
"""
