"""
ProjectHub Backend: Services Layer
==================================

What:  Data access and domain operations between the routes (HTTP) and the
       ORM models (persistence).
How:   Services take an AsyncSession and plain arguments, raise application
       errors from `projecthub.exceptions`, and return API schemas. Each
       module exposes one stateless singleton instance.

Service Inventory:
    - Repository:            generic filtered/ordered/paginated reads
    - NotificationService:   list, feed, unread count, mark as read
    - PasswordResetService:  issue reset tokens
"""
