"""Conditions that decide whether an endpoint is healthy."""

from __future__ import annotations

import math
import operator
import re
from datetime import timedelta
from typing import Callable

from healthprobe import jsonpath, pattern
from healthprobe.result import ConditionResult, Result

__all__ = ["ConditionError", "Condition", "parse_duration"]

STATUS_PLACEHOLDER = "[STATUS]"
IP_PLACEHOLDER = "[IP]"
DNS_RCODE_PLACEHOLDER = "[DNS_RCODE]"
RESPONSE_TIME_PLACEHOLDER = "[RESPONSE_TIME]"
BODY_PLACEHOLDER = "[BODY]"
CONNECTED_PLACEHOLDER = "[CONNECTED]"
CERTIFICATE_EXPIRATION_PLACEHOLDER = "[CERTIFICATE_EXPIRATION]"
DOMAIN_EXPIRATION_PLACEHOLDER = "[DOMAIN_EXPIRATION]"

LENGTH_FUNCTION_PREFIX = "len("
HAS_FUNCTION_PREFIX = "has("
PATTERN_FUNCTION_PREFIX = "pat("
ANY_FUNCTION_PREFIX = "any("
FUNCTION_SUFFIX = ")"

INVALID_CONDITION_ELEMENT_SUFFIX = "(INVALID)"
MAXIMUM_LENGTH_BEFORE_TRUNCATING = 25

_EMPTY_INPUT_MESSAGE = "unexpected end of JSON input"

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_DURATION_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_DURATION_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}


class ConditionError(ValueError):
    """Raised when a condition is malformed."""


def _parse_duration_ns(text: str) -> int:
    invalid = ValueError(f'time: invalid duration "{text}"')
    s = text
    negative = False
    if s[:1] in ("+", "-"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise invalid
    total = 0
    while s:
        found = _DURATION_COMPONENT.match(s)
        whole, fraction, unit = found.group(1), found.group(2), found.group(3)
        if not whole and not fraction:
            raise invalid
        if not unit:
            raise ValueError(f'time: missing unit in duration "{text}"')
        if unit not in _DURATION_UNITS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{text}"')
        scale = _DURATION_UNITS[unit]
        value = int(whole or "0") * scale
        if fraction:
            value += int(fraction) * scale // 10 ** len(fraction)
        total += value
        if total > 1 << 63:
            raise invalid
        s = s[found.end():]
    if not negative and total > _INT64_MAX:
        raise invalid
    return -total if negative else total


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h30m`` or ``500ms``; raise ValueError if malformed."""
    nanoseconds = _parse_duration_ns(text)
    microseconds = abs(nanoseconds) // 1000
    return timedelta(microseconds=-microseconds if nanoseconds < 0 else microseconds)


def _milliseconds(duration: timedelta) -> int:
    microseconds = (duration.days * 86400 + duration.seconds) * 1_000_000 + duration.microseconds
    quotient = abs(microseconds) // 1000
    return -quotient if microseconds < 0 else quotient


def _is_function(text: str, prefix: str) -> bool:
    return text.startswith(prefix) and text.endswith(FUNCTION_SUFFIX)


def _unwrap(text: str, prefix: str) -> str:
    return text.removeprefix(prefix).removesuffix(FUNCTION_SUFFIX)


def _matches_any(options: str, value: str) -> bool:
    return any(option.strip() == value for option in options.split(","))


def _is_equal(first: str, second: str) -> bool:
    first_is_function = first.endswith(FUNCTION_SUFFIX)
    second_is_function = second.endswith(FUNCTION_SUFFIX)
    if first_is_function or second_is_function:
        first_is_pattern = first_is_function and first.startswith(PATTERN_FUNCTION_PREFIX)
        second_is_pattern = second_is_function and second.startswith(PATTERN_FUNCTION_PREFIX)
        if first_is_pattern:
            first = _unwrap(first, PATTERN_FUNCTION_PREFIX)
        if second_is_pattern:
            second = _unwrap(second, PATTERN_FUNCTION_PREFIX)
        if first_is_pattern and not second_is_pattern:
            return pattern.match(first, second)
        if second_is_pattern and not first_is_pattern:
            return pattern.match(second, first)
        first_is_any = first_is_function and first.startswith(ANY_FUNCTION_PREFIX)
        second_is_any = second_is_function and second.startswith(ANY_FUNCTION_PREFIX)
        if first_is_any:
            first = _unwrap(first, ANY_FUNCTION_PREFIX)
        if second_is_any:
            second = _unwrap(second, ANY_FUNCTION_PREFIX)
        if first_is_any and not second_is_any:
            return _matches_any(first, second)
        if second_is_any and not first_is_any:
            return _matches_any(second, first)
    return first == second


def _resolve_body_path(element: str, result: Result) -> str:
    checking_for_length = False
    checking_for_existence = False
    if _is_function(element, LENGTH_FUNCTION_PREFIX):
        checking_for_length = True
        element = _unwrap(element, LENGTH_FUNCTION_PREFIX)
    if _is_function(element, HAS_FUNCTION_PREFIX):
        checking_for_existence = True
        element = _unwrap(element, HAS_FUNCTION_PREFIX)
    path = element.removeprefix(BODY_PLACEHOLDER).removeprefix(".")
    try:
        value, length = jsonpath.evaluate(path, result.body)
    except jsonpath.JSONPathError as exc:
        if checking_for_existence:
            return "false"
        message = str(exc)
        if message != _EMPTY_INPUT_MESSAGE:
            result.add_error(message)
        if checking_for_length:
            return f"{LENGTH_FUNCTION_PREFIX}{element}{FUNCTION_SUFFIX} {INVALID_CONDITION_ELEMENT_SUFFIX}"
        return f"{element} {INVALID_CONDITION_ELEMENT_SUFFIX}"
    if checking_for_existence:
        return "true"
    return str(length) if checking_for_length else value


def _sanitize_and_resolve(elements: list[str], result: Result) -> tuple[list[str], list[str]]:
    body = result.body.decode("utf-8", errors="replace").strip()
    resolvers: dict[str, Callable[[], str]] = {
        STATUS_PLACEHOLDER: lambda: str(result.http_status),
        IP_PLACEHOLDER: lambda: result.ip,
        RESPONSE_TIME_PLACEHOLDER: lambda: str(_milliseconds(result.duration)),
        BODY_PLACEHOLDER: lambda: body,
        DNS_RCODE_PLACEHOLDER: lambda: result.dns_rcode,
        CONNECTED_PLACEHOLDER: lambda: "true" if result.connected else "false",
        CERTIFICATE_EXPIRATION_PLACEHOLDER: lambda: str(_milliseconds(result.certificate_expiration)),
        DOMAIN_EXPIRATION_PLACEHOLDER: lambda: str(_milliseconds(result.domain_expiration)),
    }
    parameters: list[str] = []
    resolved: list[str] = []
    for raw in elements:
        element = raw.strip()
        parameters.append(element)
        resolver = resolvers.get(element.upper())
        if resolver is not None:
            element = resolver()
        elif BODY_PLACEHOLDER in element:
            element = _resolve_body_path(element, result)
        resolved.append(element)
    return parameters, resolved


def _to_number(text: str) -> int:
    try:
        nanoseconds = _parse_duration_ns(text)
    except ValueError:
        nanoseconds = 0
    if nanoseconds != 0:
        quotient = abs(nanoseconds) // 1_000_000
        return -quotient if nanoseconds < 0 else quotient
    if _INTEGER.fullmatch(text):
        number = int(text)
        if _INT64_MIN <= number <= _INT64_MAX:
            return number
    if _FLOAT.fullmatch(text):
        number = float(text)
        if math.isfinite(number):
            return int(number)
    return 0


def _truncate(text: str) -> str:
    return f"{text[:MAXIMUM_LENGTH_BEFORE_TRUNCATING]}...(truncated)"


def _prettify(parameters: list[str], resolved: list[str], symbol: str) -> str:
    if resolved[0].endswith(INVALID_CONDITION_ELEMENT_SUFFIX) or resolved[1].endswith(
        INVALID_CONDITION_ELEMENT_SUFFIX
    ):
        return f"{resolved[0]} {symbol} {resolved[1]}"
    resolved = list(resolved)
    if _is_function(parameters[0], PATTERN_FUNCTION_PREFIX) and len(resolved[1].encode()) > MAXIMUM_LENGTH_BEFORE_TRUNCATING:
        resolved[1] = _truncate(resolved[1])
    if _is_function(parameters[1], PATTERN_FUNCTION_PREFIX) and len(resolved[0].encode()) > MAXIMUM_LENGTH_BEFORE_TRUNCATING:
        resolved[0] = _truncate(resolved[0])
    first_changed = parameters[0] != resolved[0]
    second_changed = parameters[1] != resolved[1]
    first = f"{parameters[0]} ({resolved[0]})" if first_changed else parameters[0]
    second = f"{parameters[1]} ({resolved[1]})" if second_changed else parameters[1]
    return f"{first} {symbol} {second}"


_OPERATORS: tuple[tuple[str, bool, Callable[[object, object], bool]], ...] = (
    ("==", False, _is_equal),
    ("!=", False, lambda a, b: not _is_equal(a, b)),
    ("<=", True, operator.le),
    (">=", True, operator.ge),
    (">", True, operator.gt),
    ("<", True, operator.lt),
)


class Condition(str):
    """A condition of the form ``<VALUE> <COMPARATOR> <VALUE>`` that a result must meet."""

    __slots__ = ()

    def validate(self) -> None:
        """Raise ConditionError if the condition cannot be evaluated."""
        result = Result()
        self.evaluate(result, False)
        if result.errors:
            raise ConditionError(result.errors[0])

    def evaluate(self, result: Result, dont_resolve_failed_conditions: bool = False) -> bool:
        """Evaluate the condition against ``result``, record the outcome on it and return it."""
        text = str(self)
        for symbol, numerical, compare in _OPERATORS:
            separator = f" {symbol} "
            if separator in text:
                break
        else:
            result.add_error(f"invalid condition: {text}")
            return False
        parameters, resolved = _sanitize_and_resolve(text.split(separator), result)
        if numerical:
            numbers = [_to_number(value) for value in resolved]
            success = compare(numbers[0], numbers[1])
            shown = [str(number) for number in numbers]
        else:
            success = compare(resolved[0], resolved[1])
            shown = resolved
        display = text
        if not success and not dont_resolve_failed_conditions:
            display = _prettify(parameters, shown, symbol)
        result.condition_results.append(ConditionResult(condition=display, success=success))
        return success

    def has_body_placeholder(self) -> bool:
        """Whether the response body is needed to evaluate the condition."""
        return BODY_PLACEHOLDER in self

    def has_domain_expiration_placeholder(self) -> bool:
        """Whether a domain expiration lookup is needed to evaluate the condition."""
        return DOMAIN_EXPIRATION_PLACEHOLDER in self

    def has_ip_placeholder(self) -> bool:
        """Whether an IP lookup is needed to evaluate the condition."""
        return IP_PLACEHOLDER in self