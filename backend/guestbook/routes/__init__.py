# Routes package init
"""
Guestbook Backend: Routes Package
=================================

Route Inventory:
    - guestbook.py:  GET /, GET|POST /guestbook, POST /guestbook/{id}/delete,
                     DELETE /guestbook/{id}
    - auth.py:       GET|POST /login, GET|POST /logout
    - health.py:     GET /health

Routes stay thin: read the request, call a service, render or redirect.
"""
