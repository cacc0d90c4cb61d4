"""Value visitors — the decode-time sink the decoder drives.

The decoder recognizes tokens and hands them to a visitor:

    visit_str(value)      a complete string
    visit_int(value)      a complete integer
    visit_list(access)    a list was opened; pull elements from ``access``
    visit_dict(access)    a dict was opened; pull keys/values from ``access``

Container accesses are pull-based.  ``access.next_element(visitor)`` returns
the next decoded element or ``END`` once the closing ``e`` has been read.
A visitor that returns before draining its access leaves the rest for the
decoder, which then requires the closing marker straight away.

Binding visitors to application classes is left to callers; ``ValueVisitor``
builds plain ``str``/``int``/``list``/``dict`` values.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ._errors import ERR_INVALID_TYPE, BencodeError


class _End:
    """Sentinel returned by container accesses after the closing marker."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "END"


END = _End()


class Visitor:
    """Base visitor.  Every shape is refused until a subclass accepts it."""

    expecting = "a bencode value"

    def _invalid(self, what: str) -> BencodeError:
        return BencodeError(
            ERR_INVALID_TYPE,
            "invalid type: {}, expected {}".format(what, self.expecting),
        )

    def visit_str(self, value: str) -> Any:
        raise self._invalid("string {!r}".format(value))

    def visit_int(self, value: int) -> Any:
        raise self._invalid("integer {}".format(value))

    def visit_list(self, access: Any) -> Any:
        raise self._invalid("list")

    def visit_dict(self, access: Any) -> Any:
        raise self._invalid("dict")


class ValueVisitor(Visitor):
    """Rebuilds native Python values.  Duplicate dict keys: last one wins."""

    def visit_str(self, value: str) -> str:
        return value

    def visit_int(self, value: int) -> int:
        return value

    def visit_list(self, access: Any) -> List[Any]:
        return [item for item in access]

    def visit_dict(self, access: Any) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, value in access:
            out[key] = value
        return out


class StrVisitor(Visitor):
    """Accepts only strings.  Used for dict keys."""

    expecting = "a string"

    def visit_str(self, value: str) -> str:
        return value


class IntVisitor(Visitor):
    expecting = "an integer"

    def visit_int(self, value: int) -> int:
        return value
