from enum import StrEnum


class FetchCause(StrEnum):
    timeout = "timeout"
    network = "network"
    http_error = "http_error"


class SearchErrorKind(StrEnum):
    config = "config"
    timeout = "timeout"
    network = "network"
    status = "status"
    parse = "parse"


class FetchError(Exception):
    def __init__(
        self,
        message: str,
        cause: FetchCause,
        url: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.cause = cause
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ExtractionError(Exception):
    def __init__(self, message: str, source_url: str | None = None):
        self.message = message
        self.source_url = source_url
        super().__init__(message)


class BrowserLaunchError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SearchError(Exception):
    def __init__(
        self,
        message: str,
        kind: SearchErrorKind,
        status_code: int | None = None,
    ):
        self.message = message
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)
