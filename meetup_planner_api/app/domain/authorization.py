"""Ownership checks shared by the meetup operations."""

from .errors import ForbiddenError


def assert_owner(owner_id: int, requester_id: int) -> None:
    if owner_id != requester_id:
        raise ForbiddenError()
