# Services package init
"""
Guestbook Backend: Services Layer
=================================

What:  Business logic between routes (HTTP) and repositories (persistence).
How:   Services take a repository, apply the guestbook rules and return view
       models. Routes get the repository through FastAPI dependencies.

Service Inventory:
    - EntryService: validate the entry form, list, add and remove entries
    - seed_service: the demo entries and the startup hook that stores them
"""
