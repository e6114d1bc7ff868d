# healthprobe

healthprobe provides building blocks for deciding whether a service is healthy.
You describe an endpoint and a list of conditions. The conditions are then
evaluated against a `Result` that records what a probe observed: status code,
body, response time and so on.

## Install

```
pip install healthprobe
```

To run the test suite, install the test extra and run pytest:

```
pip install "healthprobe[test]"
pytest
```

## Conditions

A condition has the form `<value> <comparator> <value>`. The comparator is one
of `==`, `!=`, `<`, `<=`, `>` or `>=`, with a space on each side. A value may
be one of these placeholders, each filled in from the `Result`:

- `[STATUS]`: `http_status`
- `[IP]`: `ip`
- `[RESPONSE_TIME]`: `duration`, in milliseconds
- `[BODY]`: `body`, with surrounding whitespace removed
- `[DNS_RCODE]`: `dns_rcode`
- `[CONNECTED]`: `connected`, as `true` or `false`
- `[CERTIFICATE_EXPIRATION]`: `certificate_expiration`, in milliseconds
- `[DOMAIN_EXPIRATION]`: `domain_expiration`, in milliseconds

A value may also be a JSON path into the body, such as `[BODY].data[0].id`.

These functions are also supported:

- `len(...)`: the length of a body value
- `has(...)`: whether a body path exists
- `pat(...)`: a glob-style pattern
- `any(a, b, ...)`: a match against any of the listed values

```python
from healthprobe.condition import Condition
from healthprobe.result import Result

result = Result(http_status=404)
Condition("[STATUS] == any(200, 429)").evaluate(result, False)
print(result.condition_results[0].condition)  # [STATUS] (404) == any(200, 429)
print(result.condition_results[0].success)    # False
```

When a condition fails, the recorded text shows the resolved values in
parentheses. Pass `True` as the second argument to keep the condition text as
written.

In numeric comparisons a value may be a duration such as `48h`, `1s` or
`500ms`. Durations are compared in milliseconds. A value that is neither a
number nor a duration counts as 0.

`Condition.validate()` raises `ConditionError` when a condition has no
recognised comparator. `parse_duration(text)` turns a duration string into a
`timedelta` and raises `ValueError` if the string is malformed.

## Results and events

`healthprobe.result` provides the following:

- `Result`, with `add_error`, which ignores duplicate errors
- `ConditionResult`
- `Event` and `EventType` (`START`, `HEALTHY`, `UNHEALTHY`)
- `Uptime` and `HourlyUptimeStatistics`

`Event.from_result(result)` returns a healthy or an unhealthy event, depending
on `result.success`.

## Endpoints

```python
from healthprobe.endpoint import Endpoint

endpoint = Endpoint(
    name="website-health",
    url="https://example.com/health",
    conditions=["[STATUS] == 200", "[BODY].status == UP"],
)
endpoint.validate_and_set_defaults()
print(endpoint.type().value, endpoint.display_name())  # HTTP website-health
request = endpoint.build_http_request()
print(request.method, request.host, request.header("User-Agent"))
```

`Endpoint.type()` derives an `EndpointType` from the DNS setting and the URL
scheme. The scheme can be `tcp://`, `sctp://`, `udp://`, `icmp://`,
`starttls://`, `tls://`, `http(s)://` or `ws(s)://`.

`validate_and_set_defaults()` fills in these defaults:

- the method `GET`
- a one-minute interval
- a `User-Agent: Gatus/1.0` header
- `Content-Type: application/json` when `graphql` is set
- the default UI settings

It raises `EndpointError` for:

- a missing name, URL or condition
- a name or group that contains `"` or `\`
- a malformed condition
- an unknown type
- a `[DOMAIN_EXPIRATION]` condition with an interval under five minutes

It also lets `InvalidBadgeConfigError` and `DNSConfigError` propagate from the
UI and DNS settings.

`build_http_request()` returns an `HTTPRequest` that holds the method, URL,
host, body and headers. With `graphql` set, the body is wrapped as
`{"query": ...}`. A `Host` header overrides the host.

## Other modules

- `healthprobe.jsonpath.evaluate(path, data)`: walks a JSON document and returns
  the value as text together with its length. It raises `JSONPathError` when the
  path cannot be resolved.
- `healthprobe.pattern.match(pattern, s)`: glob matching with `*`, `?`,
  character classes and backslash escapes. Path separators are stripped from
  both arguments first, and a malformed pattern never matches.
- `healthprobe.dns.DNSConfig`: validates the query type and name, and
  `query(url, result)` sends the query over UDP with dnspython (port 53 unless
  the URL gives another). It records the response code and the last answer in
  the result. A, AAAA, CNAME, MX and NS answers are supported.
- `healthprobe.ui.UIConfig`: options that hide the hostname or URL or that keep
  failed conditions unresolved, and the response-time badge thresholds, which
  must be five ascending values. `default_ui_config()` returns the defaults.
- `healthprobe.security.SecurityConfig`: holds `BasicConfig` and `OIDCConfig`
  settings and reports through `is_valid()` whether either is complete.

## What it does not do

healthprobe evaluates conditions and checks configuration. It does not do any
of the following:

- send HTTP, TCP, UDP, SCTP, TLS, STARTTLS, ICMP or WebSocket probes; DNS
  queries are the only network check it performs
- look up IP addresses or domain expiration
- schedule checks or send alerts
- store results or publish metrics
- serve a dashboard or an API
- run a login flow; the security settings are only validated
- provide a command-line program