"""Error types raised by the listing store and interest workflow."""


class KrishiLinkError(Exception):
    """Base class for marketplace errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(KrishiLinkError):
    """No document matches the given identifier."""

    kind = "not_found"
    status_code = 404


class InvalidIdentifierError(KrishiLinkError):
    """Caller supplied an identifier that is not a valid ObjectId."""

    kind = "invalid_identifier"
    status_code = 400

    def __init__(self, name: str, value: str):
        super().__init__(f"Invalid {name}: {value!r}")
        self.name = name
        self.value = value


class ValidationFailedError(KrishiLinkError):
    kind = "validation_failed"
    status_code = 422


class InterestAlreadyDecidedError(KrishiLinkError):
    """The interest was already accepted or rejected with a different outcome."""

    kind = "interest_already_decided"
    status_code = 409


class StoreUnavailableError(KrishiLinkError):
    """MongoDB could not be reached."""

    kind = "store_unavailable"
    status_code = 503
