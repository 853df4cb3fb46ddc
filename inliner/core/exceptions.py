from typing import Optional


class InlinerError(Exception):
    """
    Base class for all client-side exceptions.
    Captures the original exception for debugging if needed.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


# --- Transport Exceptions ---


class ApiError(InlinerError):
    """
    Raised when the API answers with a non-2xx status.
    `message` is the server's `message` field when the body is JSON,
    otherwise the raw response text.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Inliner API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class InvalidPayloadError(InlinerError):
    """
    Raised when an inline data URI cannot be decoded.
    """

    pass


# --- Workflow Exceptions ---


class InvalidSourceError(InlinerError):
    """
    Raised when an edit source string is not a well-formed URL.
    """

    def __init__(self, source: str):
        super().__init__(f"Invalid source URL: {source!r}")
        self.source = source


class MissingProjectError(InlinerError):
    """
    Raised when editing an uploaded image without a project namespace.
    Nothing has been sent to the server at this point.
    """

    def __init__(self):
        super().__init__("A project is required when editing from binary content")


class OperationFailedError(InlinerError):
    """
    Raised when the status endpoint answers something other than 200/202.
    This is terminal; polling stops on the first occurrence.
    """

    def __init__(self, label: str, status_code: int, body: str):
        super().__init__(f"{label} failed with status {status_code}: {body}")
        self.label = label
        self.status_code = status_code
        self.body = body


class OperationTimedOutError(InlinerError):
    """
    Raised when the attempt budget runs out while the asset is still processing.
    """

    def __init__(self, label: str, timeout_seconds: float, url: str):
        super().__init__(f"{label} timed out after {timeout_seconds}s: {url}")
        self.label = label
        self.timeout_seconds = timeout_seconds
        self.url = url
