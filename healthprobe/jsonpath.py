"""A small JSON path evaluator for response bodies."""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any

__all__ = ["JSONPathError", "evaluate"]

_INDEX = re.compile(r"[+-]?[0-9]+")
_EMPTY_INPUT_MESSAGE = "unexpected end of JSON input"


class JSONPathError(ValueError):
    """Raised when a path cannot be resolved against a JSON document."""


def evaluate(path: str, data: bytes | str) -> tuple[str, int]:
    """Resolve ``path`` in the JSON ``data`` and return the value as text and its length.

    The length is the byte length for strings and scalars and the number of
    elements for arrays.
    """
    raw = data.encode() if isinstance(data, str) else bytes(data)
    if not path and not (raw[:1] == b"[" and raw[-1:] == b"]"):
        return raw.decode("utf-8", errors="replace"), len(raw)
    return _walk(path, _parse(raw))


def _parse(raw: bytes) -> Any:
    if not raw.strip():
        raise JSONPathError(_EMPTY_INPUT_MESSAGE)
    try:
        return json.loads(raw, parse_int=float, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as exc:
        raise JSONPathError(str(exc)) from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid character '{name[0]}' looking for beginning of value")


def _byte_length(text: str) -> int:
    return len(text.encode())


def _split_keys(path: str) -> list[str]:
    keys = []
    start = depth = 0
    for i, char in enumerate(path):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "." and depth == 0:
            keys.append(path[start:i])
            start = i + 1
    keys.append(path[start:])
    return keys


def _walk(path: str, obj: Any) -> tuple[str, int]:
    keys = _split_keys(path)
    current = keys[0]
    value = _extract(current, obj)
    if isinstance(value, dict):
        new_path = path.replace(f"{current}.", "", 1)
        if new_path == path:
            text = _marshal(value)
            return text, _byte_length(text)
        return _walk(new_path, value)
    if isinstance(value, str):
        if len(keys) > 1:
            raise JSONPathError(
                f"couldn't walk through '{keys[1]}', because '{current}' was a string instead of an object"
            )
        return value, _byte_length(value)
    if isinstance(value, list):
        return _format(value), len(value)
    if value is None:
        raise JSONPathError(
            f"couldn't walk through '{current}' because type was '<nil>', "
            "but expected 'map[string]interface{}'"
        )
    text = _format(value)
    return text, _byte_length(text)


def _extract(key: str, value: Any) -> Any:
    if key.endswith("]") and "[" in key:
        start = end = depth = 0
        index = ""
        nested = False
        for i, char in enumerate(key):
            if char == "[":
                start = i
                depth += 1
            elif char == "]" and depth == 1:
                depth -= 1
                end = i
                index = key[start + 1 : i]
                nested = key[i + 1 : i + 2] == "["
                break
        if not _INDEX.fullmatch(index):
            return None
        position = int(index)
        if position < 0:
            return None
        name = key[:start]
        if name:
            if value is None:
                return None
            if not isinstance(value, dict):
                raise JSONPathError(f"couldn't walk through '{key}' because the value is not an object")
            container = value.get(name)
            if container is None:
                return None
        else:
            container = value
        array = container if isinstance(container, list) else []
        if position < len(array):
            if nested:
                return _extract(key[end + 1 :], array[position])
            return array[position]
        return None
    if isinstance(value, list):
        return value
    if not isinstance(value, dict):
        raise JSONPathError(f"couldn't walk through '{key}' because the value is not an object")
    return value.get(key)


def _decimal_parts(number: float) -> tuple[int, tuple[int, ...], int]:
    sign, digits, exponent = Decimal(repr(number)).normalize().as_tuple()
    return sign, digits, int(exponent)


def _scientific(sign: int, digits: tuple[int, ...], exponent: int) -> str:
    power = len(digits) + exponent - 1
    head = str(digits[0])
    tail = "".join(str(d) for d in digits[1:])
    mantissa = head + (f".{tail}" if tail else "")
    return ("-" if sign else "") + f"{mantissa}e{'-' if power < 0 else '+'}{abs(power):02d}"


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    sign, digits, exponent = _decimal_parts(number)
    power = len(digits) + exponent - 1
    if power < -4 or power >= 21:
        return _scientific(sign, digits, exponent)
    return format(Decimal(repr(number)).normalize(), "f")


def _format(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_float(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "[" + " ".join(_format(item) for item in value) + "]"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{k}:{_format(value[k])}" for k in sorted(value)) + "]"
    return str(value)


def _quote(text: str) -> str:
    encoded = json.dumps(text, ensure_ascii=False)
    for char, escape in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        encoded = encoded.replace(char, escape)
    return encoded


def _marshal_float(number: float) -> str:
    magnitude = abs(number)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        text = _scientific(*_decimal_parts(number))
        if len(text) >= 4 and text[-4] == "e" and text[-3] == "-" and text[-2] == "0":
            text = text[:-2] + text[-1]
        return text
    return format(Decimal(repr(number)).normalize(), "f")


def _marshal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _marshal_float(float(value))
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, list):
        return "[" + ",".join(_marshal(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ",".join(f"{_quote(k)}:{_marshal(value[k])}" for k in sorted(value)) + "}"
    raise JSONPathError(f"cannot encode value of type {type(value).__name__}")