"""Error taxonomy shared by the store, the gateway, the orchestrator and the routes."""


class NewsroomError(Exception):
    """Base error; ``status_code`` is the HTTP status the routes answer with."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InputValidationError(NewsroomError):
    status_code = 400


class NotFoundError(NewsroomError):
    status_code = 404


class ConfigurationError(NewsroomError):
    status_code = 500


class GatewayExhaustedError(NewsroomError):
    """Every model in the ladder failed. Transient, so callers answer 429."""

    status_code = 429

    def __init__(self, message, attempts=None, last_error=None):
        super().__init__(message)
        self.attempts = attempts or []
        self.last_error = last_error


class ParseError(NewsroomError):
    """The gateway answered but its text was unusable.

    ``stage`` is one of ``extract``, ``decode`` or ``validate``.
    """

    status_code = 500

    def __init__(self, message, stage, raw_text=''):
        super().__init__(message)
        self.stage = stage
        self.raw_text = raw_text


class StorageError(NewsroomError):
    status_code = 500
