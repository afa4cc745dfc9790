"""
ProjectHub Backend: API Schemas
===============================

Pydantic models for the HTTP contract. Kept apart from the ORM models so the
API can expose a different shape (camelCase names, no internal columns).

    common.py         pagination envelopes, ErrorResponse
    notification.py   NotificationOut, MarkReadRequest, UnreadCountResponse
    auth.py           ForgotPasswordRequest, MessageResponse
    health.py         HealthResponse
"""
