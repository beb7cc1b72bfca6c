# Middleware package init
"""
Guestbook Backend: Middleware Package
=====================================

Cross-cutting request handling. The full chain is listed, outermost first,
in `guestbook.main.build_middleware`:

    Request → [Request ID] → [Logging] → [Session] → [Authentication]
            → [Authorization] → Route Handler

Responses travel back through the same layers in reverse, which is how the
logging layer sees the final status and the request ID layer sets its header.
"""
