"""Errors raised by the multipart client.

Transport failures (``httpx.HTTPError``) are not wrapped; they reach the
caller unchanged. Everything the client itself detects derives from
MultipartError.
"""

import httpx


class MultipartError(Exception):
    """Base class for errors raised by the multipart client."""

    pass


class ApiError(MultipartError):
    """Raised when the service answers with a status outside [200, 300).

    The message is the response body when there is one, otherwise the
    HTTP reason phrase.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DecodeError(MultipartError):
    """Raised when a response body is not the expected XML document."""

    def __init__(self, message: str, response_dump: str = ""):
        super().__init__(message)
        self.response_dump = response_dump


def check_response(response: httpx.Response) -> None:
    """Raise ApiError unless the response status is 2xx.

    Args:
        response: A response whose body has already been read.

    Raises:
        ApiError: If the status code is outside [200, 300).
    """
    if 200 <= response.status_code < 300:
        return

    # Default to the reason phrase if there is no body
    message = response.reason_phrase
    body = response.text
    if body:
        message = body

    raise ApiError(message, status_code=response.status_code)


def dump_response(response: httpx.Response) -> str:
    """Render a response as raw HTTP text for diagnostics."""
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    for name, value in response.headers.multi_items():
        lines.append(f"{name}: {value}")
    lines.append("")
    lines.append(response.text)
    return "\r\n".join(lines)
