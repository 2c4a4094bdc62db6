"""Domain errors raised by services and rendered by the API layer.

NotFound and Forbidden are kept distinct everywhere: a missing album or
image is always 404, an existing one the caller has no relationship to
is always 403.
"""


class PicslifyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(PicslifyError):
    status_code = 404


class Forbidden(PicslifyError):
    status_code = 403


class ValidationFailed(PicslifyError):
    status_code = 400


class Unauthorized(PicslifyError):
    status_code = 401


class Conflict(PicslifyError):
    status_code = 409


class Upstream(PicslifyError):
    """Media storage or persistence failure."""

    status_code = 502
