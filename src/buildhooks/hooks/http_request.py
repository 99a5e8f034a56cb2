"""HTTP request hook.

Issues a single HTTP request built from the mapped context values and
streams the response body to standard output.

Context keys:
    method:    DELETE, GET, POST or PUT (default GET)
    url:       Request URL (required)
    user:      Username for HTTP Basic auth (enables auth when present)
    password:  Password for HTTP Basic auth (may be empty)
    header1..N ``Name: value`` header definitions

POST and PUT always send an empty form-encoded body; request parameters and
content are not supported.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

import httpx

from buildhooks.errors import HookExecutionError, HookFailure
from buildhooks.pipeline.context import DataChannel, ExecutionContext
from buildhooks.pipeline.hook import Hook, hook

logger = logging.getLogger(__name__)

KEY_METHOD = "method"
KEY_URL = "url"
KEY_USERNAME = "user"
KEY_PASSWORD = "password"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class HttpMethod(Enum):
    """Supported request methods."""

    DELETE = "DELETE"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"

    @property
    def has_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT)


SUPPORTED_METHODS = ",".join(m.value for m in HttpMethod)


@dataclass(frozen=True)
class RequestSpec:
    """Everything needed to issue the request.

    Attributes:
        method: Request method
        url: Request URL
        headers: Ordered header name/value pairs
        username: Basic auth username, None disables auth
        password: Basic auth password
    """

    method: HttpMethod
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    username: str | None = None
    password: str = ""

    @property
    def auth(self) -> httpx.BasicAuth | None:
        if self.username is None:
            return None
        return httpx.BasicAuth(self.username, self.password)

    def build_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self.headers)
        if self.method.has_body and "content-type" not in headers:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        return headers

    @property
    def content(self) -> bytes | None:
        return b"" if self.method.has_body else None


def parse_method(value: str | None) -> HttpMethod:
    """Parse a method string, defaulting to GET.

    Raises:
        HookFailure: If the method is not supported
    """
    method_string = (value if value is not None else "GET").upper()
    try:
        return HttpMethod(method_string)
    except ValueError:
        raise HookFailure(
            f"Could not parse '{method_string}' as a HTTP method. Supported methods are: {SUPPORTED_METHODS}"
        ) from None


def build_request_spec(channel: DataChannel) -> RequestSpec:
    """Build the request specification from a data channel.

    The channel must contain a ``url`` value; callers check for it first so
    they can report which channel lacked it.
    """
    username = channel.get(KEY_USERNAME)
    return RequestSpec(
        method=parse_method(channel.get(KEY_METHOD)),
        url=channel.require(KEY_URL),
        headers=list(channel.headers),
        username=username,
        password=channel.get(KEY_PASSWORD) or "",
    )


@hook(id="httpRequest", description="Sends a single HTTP request and prints the response body.")
class HttpRequestHook(Hook):
    """Send one HTTP request per invocation and fail on non-2xx responses."""

    def __init__(
        self,
        log: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
        output: BinaryIO | None = None,
    ) -> None:
        """Initialize the hook.

        Args:
            log: Logger to report to
            transport: httpx transport to send requests through (default network)
            output: Binary stream the response body is copied to (default stdout)
        """
        self.log = log or logger
        self.transport = transport
        self.output = output

    def execute(self, context: ExecutionContext) -> None:
        if not context.has_mapped_data():
            self.log.warning(f"No request information specified! Skipping execution of hook '{context.step_id}'.")
            return

        if not context.data.contains(KEY_URL):
            raise HookFailure(f"No connection URL ('{KEY_URL}') specified for hook '{context.step_id}'")

        self.send(build_request_spec(context.data))

    def rollback(self, context: ExecutionContext) -> None:
        if not context.has_mapped_rollback_data():
            self.log.debug(f"No rollback request to execute! Skipping rollback of hook '{context.step_id}'.")
            return

        if not context.rollback_data.contains(KEY_URL):
            raise HookFailure(f"No rollback connection URL ('{KEY_URL}') specified for hook '{context.step_id}'")

        self.send(build_request_spec(context.rollback_data))

    def send(self, spec: RequestSpec) -> None:
        """Send the request and copy a successful response body to the output.

        Raises:
            HookFailure: If the response status is not 2xx
            HookExecutionError: On any transport or I/O error
        """
        method = spec.method.value
        self.log.debug(f"Sending {method} request to '{spec.url}'")

        try:
            with httpx.Client(auth=spec.auth, transport=self.transport, timeout=None, follow_redirects=True) as client:
                with client.stream(method, spec.url, headers=spec.build_headers(), content=spec.content) as response:
                    if not response.is_success:
                        raise HookFailure(
                            f"The {method} request to '{spec.url}' was not successful. "
                            f"Status code: {response.status_code} Message: {response.reason_phrase}"
                        )
                    self._copy_body(response)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, OSError) as e:
            raise HookExecutionError(
                f"An unexpected exception was caught during the execution of a hook HTTP request: {e}", e
            ) from e

    def _copy_body(self, response: httpx.Response) -> None:
        if self.output is not None:
            output = self.output
        else:
            # text written to stdout before the body must come out first
            sys.stdout.flush()
            output = sys.stdout.buffer
        for chunk in response.iter_bytes():
            output.write(chunk)
        # empty line for line break after the content
        output.write(b"\n")
        output.flush()
