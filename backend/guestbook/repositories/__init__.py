# Repositories package init
"""
Guestbook Backend: Repositories
===============================

Thin persistence wrappers around an AsyncSession. Services and startup hooks
receive a repository instead of reaching for a global session.
"""
