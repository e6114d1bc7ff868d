"""Endpoint configuration: validation, defaults and request building."""

from __future__ import annotations

import enum
import json
import string
from dataclasses import dataclass, field
from datetime import timedelta
from urllib.parse import urlsplit

from healthprobe.condition import DOMAIN_EXPIRATION_PLACEHOLDER, Condition, ConditionError
from healthprobe.dns import DNSConfig
from healthprobe.ui import UIConfig, default_ui_config

__all__ = ["EndpointError", "EndpointType", "Endpoint", "HTTPRequest"]

HOST_HEADER = "Host"
CONTENT_TYPE_HEADER = "Content-Type"
USER_AGENT_HEADER = "User-Agent"
DEFAULT_USER_AGENT = "Gatus/1.0"
DEFAULT_METHOD = "GET"
DEFAULT_INTERVAL = timedelta(minutes=1)
MINIMUM_DOMAIN_EXPIRATION_INTERVAL = timedelta(minutes=5)

NO_CONDITION_MESSAGE = "you must specify at least one condition per endpoint"
NO_URL_MESSAGE = "you must specify an url for each endpoint"
NO_NAME_MESSAGE = "you must specify a name for each endpoint"
INVALID_NAME_OR_GROUP_MESSAGE = 'endpoint name and group must not have " or \\'
UNKNOWN_TYPE_MESSAGE = "unknown endpoint type"
INVALID_CONDITION_FORMAT_MESSAGE = (
    "invalid condition format: does not match '<VALUE> <COMPARATOR> <VALUE>'"
)
INVALID_DOMAIN_EXPIRATION_INTERVAL_MESSAGE = (
    "the minimum interval for an endpoint with a condition using the "
    + DOMAIN_EXPIRATION_PLACEHOLDER
    + " placeholder is 300s (5m)"
)

_TOKEN_CHARACTERS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


class EndpointError(ValueError):
    """Raised when an endpoint is misconfigured."""


class EndpointType(str, enum.Enum):
    """The kind of check performed against an endpoint."""

    DNS = "DNS"
    TCP = "TCP"
    SCTP = "SCTP"
    UDP = "UDP"
    ICMP = "ICMP"
    STARTTLS = "STARTTLS"
    TLS = "TLS"
    HTTP = "HTTP"
    WEBSOCKET = "WEBSOCKET"
    UNKNOWN = "UNKNOWN"


_PREFIXES: tuple[tuple[tuple[str, ...], EndpointType], ...] = (
    (("tcp://",), EndpointType.TCP),
    (("sctp://",), EndpointType.SCTP),
    (("udp://",), EndpointType.UDP),
    (("icmp://",), EndpointType.ICMP),
    (("starttls://",), EndpointType.STARTTLS),
    (("tls://",), EndpointType.TLS),
    (("http://", "https://"), EndpointType.HTTP),
    (("ws://", "wss://"), EndpointType.WEBSOCKET),
)


def _canonical_header(name: str) -> str:
    if not name or any(char not in _TOKEN_CHARACTERS for char in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def _url_host(url: str) -> str:
    return urlsplit(url).netloc.rpartition("@")[2]


def _check_request(method: str, url: str) -> None:
    if method and any(char not in _TOKEN_CHARACTERS for char in method):
        raise EndpointError(f'net/http: invalid method "{method}"')
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in url):
        raise EndpointError(
            f'parse "{url}": net/url: invalid control character in URL'
        )
    try:
        parts = urlsplit(url)
        _ = parts.port
    except ValueError as exc:
        raise EndpointError(f'parse "{url}": {exc}') from exc


def _graphql_body(query: str) -> bytes:
    encoded = json.dumps(query, ensure_ascii=False)
    for char, escape in (("<", "\\u003c"), (">", "\\u003e"), ("&", "\\u0026")):
        encoded = encoded.replace(char, escape)
    return ('{"query":' + encoded + "}").encode()


@dataclass
class HTTPRequest:
    """An HTTP request ready to be sent to an endpoint."""

    method: str
    url: str
    host: str
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str:
        """Return the value of a header, looked up case-insensitively, or an empty string."""
        return self.headers.get(_canonical_header(name), "")


@dataclass
class Endpoint:
    """The configuration of a monitored endpoint."""

    name: str = ""
    url: str = ""
    group: str = ""
    enabled: bool | None = None
    dns: DNSConfig | None = None
    method: str = ""
    body: str = ""
    graphql: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    interval: timedelta = field(default_factory=timedelta)
    conditions: list[Condition] = field(default_factory=list)
    ui_config: UIConfig | None = None
    number_of_failures_in_a_row: int = 0
    number_of_successes_in_a_row: int = 0

    def __post_init__(self) -> None:
        self.conditions = [Condition(condition) for condition in self.conditions or []]

    def is_enabled(self) -> bool:
        """Whether the endpoint is monitored; endpoints are enabled unless set otherwise."""
        return True if self.enabled is None else self.enabled

    def type(self) -> EndpointType:
        """The kind of check this endpoint calls for, derived from its DNS setting and URL."""
        if self.dns is not None:
            return EndpointType.DNS
        for prefixes, endpoint_type in _PREFIXES:
            if self.url.startswith(prefixes):
                return endpoint_type
        return EndpointType.UNKNOWN

    def display_name(self) -> str:
        """The name, preceded by the group and a slash when there is a group."""
        return f"{self.group}/{self.name}" if self.group else self.name

    def validate_and_set_defaults(self) -> None:
        """Fill in defaults and raise if the configuration is invalid."""
        if self.ui_config is None:
            self.ui_config = default_ui_config()
        else:
            self.ui_config.validate_and_set_defaults()
        if not self.interval:
            self.interval = DEFAULT_INTERVAL
        if not self.method:
            self.method = DEFAULT_METHOD
        if self.headers is None:
            self.headers = {}
        self.headers.setdefault(USER_AGENT_HEADER, DEFAULT_USER_AGENT)
        if self.graphql:
            self.headers.setdefault(CONTENT_TYPE_HEADER, "application/json")
        if not self.name:
            raise EndpointError(NO_NAME_MESSAGE)
        if any(char in '"\\' for char in self.name + self.group):
            raise EndpointError(INVALID_NAME_OR_GROUP_MESSAGE)
        if not self.url:
            raise EndpointError(NO_URL_MESSAGE)
        if not self.conditions:
            raise EndpointError(NO_CONDITION_MESSAGE)
        for condition in self.conditions:
            if (
                self.interval < MINIMUM_DOMAIN_EXPIRATION_INTERVAL
                and condition.has_domain_expiration_placeholder()
            ):
                raise EndpointError(INVALID_DOMAIN_EXPIRATION_INTERVAL_MESSAGE)
            try:
                condition.validate()
            except ConditionError as exc:
                raise EndpointError(f"{INVALID_CONDITION_FORMAT_MESSAGE}: {exc}") from exc
        if self.dns is not None:
            self.dns.validate_and_set_default()
            return
        if self.type() is EndpointType.UNKNOWN:
            raise EndpointError(UNKNOWN_TYPE_MESSAGE)
        _check_request(self.method, self.url)

    def build_http_request(self) -> HTTPRequest:
        """Build the HTTP request described by this endpoint."""
        body = _graphql_body(self.body) if self.graphql else self.body.encode()
        request = HTTPRequest(
            method=self.method or DEFAULT_METHOD,
            url=self.url,
            host=_url_host(self.url),
            body=body,
        )
        for name, value in (self.headers or {}).items():
            request.headers[_canonical_header(name)] = value
            if name == HOST_HEADER:
                request.host = value
        return request

    def needs_to_read_body(self) -> bool:
        """Whether any condition needs the response body."""
        return any(condition.has_body_placeholder() for condition in self.conditions)

    def needs_to_retrieve_domain_expiration(self) -> bool:
        """Whether any condition needs a domain expiration lookup."""
        return any(condition.has_domain_expiration_placeholder() for condition in self.conditions)

    def needs_to_retrieve_ip(self) -> bool:
        """Whether any condition needs an IP lookup."""
        return any(condition.has_ip_placeholder() for condition in self.conditions)