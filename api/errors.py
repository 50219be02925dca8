class ApiError(Exception):
    """An error that maps straight onto a JSON error response."""

    status_code = 500

    def __init__(self, error: str, details: str | None = None, status_code: int | None = None):
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_content(self) -> dict:
        content = {"error": self.error}
        if self.details is not None:
            content["details"] = self.details
        return content


class InvalidInput(ApiError):
    status_code = 400


class MethodNotAllowed(ApiError):
    status_code = 405

    def __init__(self, error: str = "Method not allowed"):
        super().__init__(error)


class UpstreamFetchError(ApiError):
    status_code = 500


class ConfigError(RuntimeError):
    """Required configuration is missing. Raised at startup, never per request."""


def error_details(exc: BaseException) -> str:
    # Mirrors `e?.message || String(e)`: prefer the message, fall back to the type.
    message = str(exc)
    return message or exc.__class__.__name__
