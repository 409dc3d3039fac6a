"""
Service layer.

Each service encapsulates the business rules for one domain and talks
to storage only through the repositories in ``app.repositories``.
"""
