"""
Model codec
===========

Turns response bodies into typed models and request models into JSON.

Decoding rules shared by every model's `from_dict`:

- a field absent from the JSON stays None; a field present with an empty
  value (``""``, ``[]``) keeps that value, so the two never collide;
- unknown JSON fields are ignored (they remain reachable through `raw`);
- integers are 64-bit signed; booleans are never accepted as integers;
- a type mismatch raises DecodeError whose `path` points at the offending
  value (``reports[0].account.id``).

Download operations skip JSON entirely: their body is surfaced as a
`BinaryStream` the caller must close.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import json
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type, TypeVar

import httpx

from scc_results.api.core.context import DEADLINE_EXCEEDED, RequestContext
from scc_results.api.core.errors import CanceledError, DecodeError, TransportError

logger = logging.getLogger(__name__)

JSON = Dict[str, Any]
T = TypeVar("T")

EXCERPT_LIMIT = 256
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ───────────────────────────────────────────────────────────────
# Field helpers
# ───────────────────────────────────────────────────────────────

def _type_error(key: str, expected: str, value: Any) -> DecodeError:
    return DecodeError(
        f"expected {expected}, got {type(value).__name__}",
        path=key,
    )


def require(d: Mapping[str, Any], key: str) -> None:
    """Raise DecodeError when a required field is absent or null."""
    if d.get(key) is None:
        raise DecodeError("missing required field", path=key)


def opt_str(d: Mapping[str, Any], key: str) -> Optional[str]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _type_error(key, "string", value)
    return value


def opt_int(d: Mapping[str, Any], key: str) -> Optional[int]:
    value = d.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _type_error(key, "integer", value)
    if isinstance(value, float):
        if not value.is_integer():
            raise _type_error(key, "integer", value)
        value = int(value)
    if not INT64_MIN <= value <= INT64_MAX:
        raise DecodeError(f"integer {value} overflows int64", path=key)
    return value


def opt_any(d: Mapping[str, Any], key: str) -> Any:
    """Free-form value (parameter values, expected/found values)."""
    return d.get(key)


def opt_str_list(d: Mapping[str, Any], key: str) -> Optional[List[str]]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise _type_error(key, "array", value)
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise _type_error(f"{key}[{i}]", "string", item)
    return list(value)


def opt_model(d: Mapping[str, Any], key: str, model: Type[T]) -> Optional[T]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise _type_error(key, "object", value)
    try:
        return model.from_dict(value)  # type: ignore[attr-defined]
    except DecodeError as exc:
        raise exc.prefixed(key) from None


def opt_model_list(d: Mapping[str, Any], key: str, model: Type[T]) -> Optional[List[T]]:
    value = d.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise _type_error(key, "array", value)
    items: List[T] = []
    for i, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise _type_error(f"{key}[{i}]", "object", item)
        try:
            items.append(model.from_dict(item))  # type: ignore[attr-defined]
        except DecodeError as exc:
            raise exc.prefixed(f"{key}[{i}]") from None
    return items


# ───────────────────────────────────────────────────────────────
# Whole-body decode / encode
# ───────────────────────────────────────────────────────────────

def excerpt(body: bytes) -> bytes:
    return bytes(body[:EXCERPT_LIMIT])


def parse_json(body: bytes) -> Any:
    """Parse raw bytes as JSON, raising DecodeError on malformed input."""
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        position = getattr(exc, "pos", None)
        message = "response body is not valid JSON"
        if position is not None:
            message = f"{message}: {getattr(exc, 'msg', exc)} at offset {position}"
        raise DecodeError(message, path="$", body_excerpt=excerpt(body)) from exc


def decode_json(body: Optional[bytes], decoder: Callable[[Mapping[str, Any]], T]) -> Optional[T]:
    """
    Decode a JSON object body with `decoder` (usually `Model.from_dict`).

    A zero-length body decodes to None rather than failing.
    """
    if not body:
        return None
    data = parse_json(body)
    if not isinstance(data, Mapping):
        raise DecodeError(
            f"expected a JSON object, got {type(data).__name__}",
            path="$",
            body_excerpt=excerpt(body),
        )
    try:
        result = decoder(data)
    except DecodeError as exc:
        raise DecodeError(exc.message, path=exc.path, body_excerpt=excerpt(body)) from None
    logger.debug("Decoded response body", extra={"model": type(result).__name__})
    return result


def _to_jsonable(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out: JSON = {}
        for f in dataclasses.fields(obj):
            if f.name == "raw":
                continue
            value = getattr(obj, f.name)
            if value is None:
                continue
            out[f.name] = _to_jsonable(value)
        return out
    if isinstance(obj, Mapping):
        return {str(k): _to_jsonable(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    return obj


def encode_json(obj: Any) -> bytes:
    """Encode a model (or mapping) as JSON, omitting unset optional fields."""
    return json.dumps(_to_jsonable(obj), separators=(",", ":")).encode("utf-8")


# ───────────────────────────────────────────────────────────────
# Binary streams
# ───────────────────────────────────────────────────────────────

def iter_body(
    response: httpx.Response,
    context: Optional[RequestContext] = None,
    chunk_size: Optional[int] = None,
) -> Iterator[bytes]:
    """
    Yield the response body chunk by chunk, honouring `context`.

    The context is checked after every chunk, so a cancelled or expired
    context stops a slow body between reads. A read timeout is reported as
    CanceledError only once the context's deadline has passed; any other
    read failure is a TransportError. The caller closes the response.
    """
    context = context or RequestContext.background()
    try:
        for chunk in response.iter_bytes(chunk_size):
            context.check()
            yield chunk
    except httpx.TimeoutException as exc:
        if context.expired():
            raise CanceledError(f"{DEADLINE_EXCEEDED}: {exc}", cause=exc) from exc
        raise TransportError(f"reading response body timed out: {exc}", cause=exc) from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"reading response body failed: {exc}", cause=exc) from exc


class BinaryStream:
    """
    Lazy byte sequence over a streamed HTTP response body.

    The stream can be consumed once, either by iterating over chunks or with
    `read()`. Reads honour the request context of the call that returned
    the stream. The caller owns it and must close it, preferably with a
    `with` block:

        with client.get_report_evaluation(options)[0] as stream:
            data = stream.read()
    """

    def __init__(
        self,
        response: httpx.Response,
        chunk_size: Optional[int] = None,
        context: Optional[RequestContext] = None,
    ) -> None:
        self._response = response
        self._chunk_size = chunk_size
        self._context = context
        self._consumed = False

    @property
    def closed(self) -> bool:
        return self._response.is_closed

    def iter_bytes(self) -> Iterator[bytes]:
        if self._consumed:
            raise ValueError("stream has already been consumed")
        self._consumed = True
        try:
            yield from iter_body(self._response, self._context, self._chunk_size)
        finally:
            self.close()

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_bytes()

    def read(self) -> bytes:
        return b"".join(self.iter_bytes())

    def close(self) -> None:
        if not self._response.is_closed:
            self._response.close()

    def __enter__(self) -> "BinaryStream":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: Optional[Any]) -> None:
        self.close()


__all__ = [
    "BinaryStream",
    "decode_json",
    "encode_json",
    "excerpt",
    "iter_body",
    "opt_any",
    "opt_int",
    "opt_model",
    "opt_model_list",
    "opt_str",
    "opt_str_list",
    "parse_json",
    "require",
]
