"""
Domain rules for meetups and subscriptions.

Everything in this package is pure: no I/O, no clock reads.  Services
in ``app.services`` supply the current instant and the repositories.
"""
