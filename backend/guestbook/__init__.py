"""
Guestbook Backend: Application Package
======================================

What: A small guestbook web application. Visitors read entries; signed-in
      users add them; administrators remove them.
Who:  Imported by uvicorn (`guestbook.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes (HTML views + /health)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Security (session, login, rules)  │  ← who may do what
    ├─────────────────────────────────────┤
    │   Services (entries, seeding)       │  ← business rules
    ├─────────────────────────────────────┤
    │   Repositories + Models             │  ← SQLAlchemy ORM
    ├─────────────────────────────────────┤
    │   Database (async engine/sessions)  │  ← persistence
    └─────────────────────────────────────┘

    The application is assembled explicitly in `guestbook.main.create_app`:
    middleware order, security policy and startup hooks are plain lists
    built there, not discovered at import time.
"""

__version__ = "1.0.0"
