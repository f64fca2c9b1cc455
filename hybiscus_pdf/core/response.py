"""Attribute-style wrappers around decoded API responses.

    >>> r = Response({"user": {"name": "x"}})
    >>> r.user.name
    'x'

Unknown fields read as None, mirroring the loose shape of API bodies. Nested
mappings are wrapped when accessed, not when the response is built.

Fields named after a wrapper method (get, to_dict) or starting with an
underscore are not reachable as attributes; use item access instead:

    >>> Response({"get": 1})["get"]
    1
"""

from typing import Any, Dict, Iterator, Mapping, Optional


class ResponseObject:
    """Read-only view over a decoded JSON object."""

    __slots__ = ("_attributes",)

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None):
        object.__setattr__(self, "_attributes", dict(attributes or {}))

    @staticmethod
    def _wrap(value: Any) -> Any:
        if isinstance(value, Mapping):
            return ResponseObject(value)
        return value

    def __getattr__(self, name: str) -> Any:
        # only called for names the class does not define, so get/to_dict win
        # private and dunder lookups must not turn into field reads (copy, pickle)
        if name.startswith("_"):
            raise AttributeError(name)
        return self._wrap(self._attributes.get(name))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __getitem__(self, key: str) -> Any:
        return self._wrap(self._attributes[key])

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResponseObject):
            return self._attributes == other._attributes
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __reduce__(self):
        return (type(self), (self._attributes,))

    def get(self, key: str, default: Any = None) -> Any:
        return self._wrap(self._attributes.get(key, default))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"


class Response(ResponseObject):
    """Standard object returned by every ReportRequest endpoint."""

    __slots__ = ()
