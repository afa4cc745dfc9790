"""
ProjectHub Backend: Middleware Package
======================================

What:  Cross-cutting request concerns.

Contents:
    request_id.py   RequestIDMiddleware: correlation ID on every request,
                    exposed to log records through a ContextVar
    rate_limit.py   rate_limit decorator: fixed-window limiter applied per
                    route, plus the store and the background sweeper

Middleware chain (outermost first):
    Request → [CORS] → [GZip] → [Request ID] → Route Handler

Request and error logging are done by the route wrapper in
`projecthub.error_handler`, so they see the final status of each handler.
"""
