"""
Application package initializer.

The application is organised in layers: ``domain`` holds the pure
scheduling and ownership rules, ``repositories`` the storage
interfaces and their SQLite implementation, ``services`` the use cases
built from both, and ``api`` the HTTP routes.  ``core`` carries
configuration, logging, database and authentication plumbing.
"""
