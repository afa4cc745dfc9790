"""
ProjectHub Backend: API Routes Package
======================================

Route Inventory:
    - health.py:         GET  /api/health
    - notifications.py:  GET  /api/notifications
                         GET  /api/notifications/feed
                         GET  /api/notifications/unread-count
                         POST /api/notifications
    - auth.py:           POST /api/forgot-password

Routes stay thin: read the request, call a service, return a schema. Every
handler is wrapped by `with_error_handler`, which owns error responses and
request logging.
"""
