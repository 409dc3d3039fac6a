"""
Typed errors raised by the meetup and subscription rules.

Each error carries the HTTP status the boundary layer should answer
with.  Missing meetups answer 400 rather than 404 and ownership
failures answer 401; existing clients depend on both.
"""


class MeetupPlannerError(Exception):
    """Base class for every domain rejection."""

    status_code = 400
    message = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ValidationError(MeetupPlannerError):
    message = "Validation fails"


class PastDateError(MeetupPlannerError):
    message = "Past dates are not permitted"


class BannerNotFoundError(MeetupPlannerError):
    message = "The banner informed does not exist"


class DuplicateMeetupError(MeetupPlannerError):
    message = "Meetup already exists"


class NotFoundError(MeetupPlannerError):
    message = "This meetup does not exist"


class ForbiddenError(MeetupPlannerError):
    status_code = 401
    message = "You do not have permission to change this meetup"


class CancellationWindowError(MeetupPlannerError):
    status_code = 401
    message = "You can only cancel meetups 2 days in advance"


class MeetupNotFoundError(MeetupPlannerError):
    message = "Meetup does not exist"


class MeetupPastError(MeetupPlannerError):
    message = "Meetup already passed"


class SelfSubscriptionError(MeetupPlannerError):
    message = "Can't subscribe to your own meetups"


class DuplicateSubscriptionError(MeetupPlannerError):
    message = "You are already subscribed to this meetup"


class TimeConflictError(MeetupPlannerError):
    message = "Can't subscribe to two meetups at the same hour"


class TaskNotFoundError(MeetupPlannerError):
    message = "Task not found"
