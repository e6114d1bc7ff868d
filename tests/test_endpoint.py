from datetime import timedelta

import pytest

from healthprobe.dns import DNSConfig, DNSConfigError
from healthprobe.endpoint import Endpoint, EndpointError, EndpointType
from healthprobe.ui import Badge, InvalidBadgeConfigError, ResponseTime, UIConfig


def test_is_enabled():
    assert Endpoint(enabled=None).is_enabled() is True
    assert Endpoint(enabled=False).is_enabled() is False
    assert Endpoint(enabled=True).is_enabled() is True


@pytest.mark.parametrize(
    "url,dns,expected",
    [
        ("8.8.8.8", DNSConfig(query_type="A", query_name="example.com"), EndpointType.DNS),
        ("tcp://127.0.0.1:6379", None, EndpointType.TCP),
        ("icmp://example.com", None, EndpointType.ICMP),
        ("sctp://example.com", None, EndpointType.SCTP),
        ("udp://example.com", None, EndpointType.UDP),
        ("starttls://smtp.gmail.com:587", None, EndpointType.STARTTLS),
        ("tls://example.com:443", None, EndpointType.TLS),
        ("https://twin.sh/health", None, EndpointType.HTTP),
        ("wss://example.com/", None, EndpointType.WEBSOCKET),
        ("ws://example.com/", None, EndpointType.WEBSOCKET),
        ("invalid://example.org", None, EndpointType.UNKNOWN),
        ("no-scheme", None, EndpointType.UNKNOWN),
    ],
)
def test_type(url, dns, expected):
    assert Endpoint(url=url, dns=dns).type() is expected


def test_validate_and_set_defaults():
    endpoint = Endpoint(
        name="website-health",
        url="https://twin.sh/health",
        conditions=["[STATUS] == 200"],
    )
    endpoint.validate_and_set_defaults()
    assert endpoint.method == "GET"
    assert endpoint.interval == timedelta(minutes=1)
    assert endpoint.headers == {"User-Agent": "Gatus/1.0"}
    assert endpoint.ui_config.badge.response_time.thresholds == [50, 200, 300, 500, 750]


def test_validate_with_invalid_condition():
    endpoint = Endpoint(
        name="invalid-condition",
        url="https://twin.sh/health",
        conditions=["[STATUS] invalid 200"],
    )
    with pytest.raises(EndpointError, match="invalid condition format"):
        endpoint.validate_and_set_defaults()


def test_validate_with_dns_adds_trailing_dot():
    endpoint = Endpoint(
        name="dns-test",
        url="https://example.com",
        dns=DNSConfig(query_type="A", query_name="example.com"),
        conditions=["[DNS_RCODE] == NOERROR"],
    )
    endpoint.validate_and_set_defaults()
    assert endpoint.dns.query_name == "example.com."


def test_validate_with_invalid_dns_query_type():
    endpoint = Endpoint(
        name="dns-test",
        url="8.8.8.8",
        dns=DNSConfig(query_type="B", query_name="example.com"),
        conditions=["[DNS_RCODE] == NOERROR"],
    )
    with pytest.raises(DNSConfigError, match="invalid query type"):
        endpoint.validate_and_set_defaults()


@pytest.mark.parametrize(
    "endpoint,message",
    [
        (
            Endpoint(name="", url="https://example.com", conditions=["[STATUS] == 200"]),
            "you must specify a name for each endpoint",
        ),
        (
            Endpoint(name="endpoint-with-no-url", url="", conditions=["[STATUS] == 200"]),
            "you must specify an url for each endpoint",
        ),
        (
            Endpoint(name="endpoint-with-no-conditions", url="https://example.com"),
            "you must specify at least one condition per endpoint",
        ),
        (
            Endpoint(
                name="domain-expiration-with-bad-interval",
                url="https://example.com",
                interval=timedelta(minutes=1),
                conditions=["[DOMAIN_EXPIRATION] > 720h"],
            ),
            "the minimum interval for an endpoint with a condition using the "
            "[DOMAIN_EXPIRATION] placeholder is 300s (5m)",
        ),
        (
            Endpoint(name='bad"name', url="https://example.com", conditions=["[STATUS] == 200"]),
            'endpoint name and group must not have " or \\',
        ),
        (
            Endpoint(name="unknown", url="invalid://example.org", conditions=["[STATUS] == 200"]),
            "unknown endpoint type",
        ),
    ],
)
def test_validate_simple_errors(endpoint, message):
    with pytest.raises(EndpointError) as info:
        endpoint.validate_and_set_defaults()
    assert str(info.value) == message


def test_validate_domain_expiration_with_good_interval():
    endpoint = Endpoint(
        name="domain-expiration-with-good-interval",
        url="https://example.com",
        interval=timedelta(minutes=5),
        conditions=["[DOMAIN_EXPIRATION] > 720h"],
    )
    endpoint.validate_and_set_defaults()
    assert endpoint.interval == timedelta(minutes=5)


def test_validate_invalid_method():
    endpoint = Endpoint(
        name="bad-method",
        url="https://example.com",
        method="BAD METHOD",
        conditions=["[STATUS] == 200"],
    )
    with pytest.raises(EndpointError, match="invalid method"):
        endpoint.validate_and_set_defaults()


def test_validate_invalid_badge():
    endpoint = Endpoint(
        name="bad-badge",
        url="https://example.com",
        conditions=["[STATUS] == 200"],
        ui_config=UIConfig(badge=Badge(response_time=ResponseTime(thresholds=[1, 2, 3]))),
    )
    with pytest.raises(InvalidBadgeConfigError):
        endpoint.validate_and_set_defaults()


def test_build_http_request():
    endpoint = Endpoint(
        name="website-health",
        url="https://twin.sh/health",
        conditions=["[STATUS] == 200"],
    )
    endpoint.validate_and_set_defaults()
    request = endpoint.build_http_request()
    assert request.method == "GET"
    assert request.host == "twin.sh"
    assert request.header("User-Agent") == "Gatus/1.0"


def test_build_http_request_with_custom_user_agent():
    endpoint = Endpoint(
        name="website-health",
        url="https://twin.sh/health",
        conditions=["[STATUS] == 200"],
        headers={"User-Agent": "Test/2.0"},
    )
    endpoint.validate_and_set_defaults()
    request = endpoint.build_http_request()
    assert request.method == "GET"
    assert request.host == "twin.sh"
    assert request.header("user-agent") == "Test/2.0"


def test_build_http_request_with_host_header():
    endpoint = Endpoint(
        name="website-health",
        url="https://twin.sh/health",
        method="POST",
        conditions=["[STATUS] == 200"],
        headers={"Host": "example.com"},
    )
    endpoint.validate_and_set_defaults()
    request = endpoint.build_http_request()
    assert request.method == "POST"
    assert request.host == "example.com"


def test_build_http_request_with_graphql_enabled():
    endpoint = Endpoint(
        name="website-graphql",
        url="https://twin.sh/graphql",
        method="POST",
        conditions=["[STATUS] == 200"],
        graphql=True,
        body='{\n  users(gender: "female") {\n    id\n    name\n  }\n}',
    )
    endpoint.validate_and_set_defaults()
    request = endpoint.build_http_request()
    assert request.method == "POST"
    assert request.header("Content-Type") == "application/json"
    assert request.body.startswith(b'{"query":')


def test_graphql_keeps_custom_content_type():
    endpoint = Endpoint(
        name="website-graphql",
        url="https://twin.sh/graphql",
        conditions=["[STATUS] == 200"],
        graphql=True,
        headers={"Content-Type": "application/graphql"},
    )
    endpoint.validate_and_set_defaults()
    assert endpoint.headers["Content-Type"] == "application/graphql"


def test_display_name():
    assert Endpoint(name="n").display_name() == "n"
    assert Endpoint(group="g", name="n").display_name() == "g/n"


def test_needs_to_read_body():
    status = "[STATUS] == 200"
    body = "[BODY].status == UP"
    body_length = "len([BODY].tags) > 0"
    assert Endpoint(conditions=[status]).needs_to_read_body() is False
    assert Endpoint(conditions=[body]).needs_to_read_body() is True
    assert Endpoint(conditions=[body_length]).needs_to_read_body() is True
    assert Endpoint(conditions=[status, body]).needs_to_read_body() is True
    assert Endpoint(conditions=[body, status]).needs_to_read_body() is True
    assert Endpoint(conditions=[body_length, status]).needs_to_read_body() is True


def test_needs_to_retrieve_domain_expiration():
    assert Endpoint(conditions=["[STATUS] == 200"]).needs_to_retrieve_domain_expiration() is False
    assert (
        Endpoint(
            conditions=["[STATUS] == 200", "[DOMAIN_EXPIRATION] < 720h"]
        ).needs_to_retrieve_domain_expiration()
        is True
    )


def test_needs_to_retrieve_ip():
    assert Endpoint(conditions=["[STATUS] == 200"]).needs_to_retrieve_ip() is False
    assert Endpoint(conditions=["[STATUS] == 200", "[IP] == 127.0.0.1"]).needs_to_retrieve_ip() is True