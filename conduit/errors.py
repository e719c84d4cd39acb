"""
Error taxonomy shared by the service and router layers.

Services raise these instead of returning sentinel values; a single
exception handler registered in ``conduit.main`` renders every
``ConduitError`` as ``{"errors": {"body": [message]}}`` with the
subclass's status code.
"""


class ConduitError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ConduitError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(ConduitError):
    status_code = 404
    default_message = "Not found"


class InvalidTitle(ConduitError):
    status_code = 422
    default_message = "Title cannot be reduced to a slug"


class DuplicateSlug(ConduitError):
    status_code = 409
    default_message = "An article with this slug already exists"


class SelfFollow(ConduitError):
    status_code = 422
    default_message = "Users cannot follow themselves"


class InternalError(ConduitError):
    status_code = 500
