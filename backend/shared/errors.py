"""Exceptions raised by the digest notification core."""


class NotificationError(Exception):
    """Base class for all notification errors."""


class NotFoundError(NotificationError):
    """User does not exist or is not on the daily subscription."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found or not subscribed to daily digests")


class NotModifiedError(NotificationError):
    """User is subscribed but nothing they follow has changed."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No changes to report for user {user_id}")


class UpstreamUnavailableError(NotificationError):
    """The resource provider call failed."""

    def __init__(self, application: str, reason: str):
        self.application = application
        self.reason = reason
        super().__init__(f"Resource provider for {application} unavailable: {reason}")


class SendFailureError(NotificationError):
    """The mail collaborator could not deliver a digest."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Failed to send digest to user {user_id}: {reason}")


class UnknownResourceTypeError(NotificationError):
    """A resource type tag outside the closed vocabulary."""

    def __init__(self, type_tag: object):
        self.type_tag = type_tag
        super().__init__(f"Unknown type in resource: {type_tag}")
