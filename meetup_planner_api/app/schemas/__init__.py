"""
Pydantic schema definitions for API payloads.

Each domain (meetups, subscriptions, tasks) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the entities in ``app.domain`` to decouple API representation from
persistence.
"""
