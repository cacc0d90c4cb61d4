"""Value producer — walks native Python values and drives an Encoder.

Dispatch order matters:

    __bencode__(encoder)   objects that know how to encode themselves
    None                   absent value, zero bytes
    bool                   before int; bencode has no booleans, so this fails
    enum.Enum              unit variant: the member name as a string
                           (IntEnum and IntFlag members encode as ints)
    int                    signed 64-bit, range-checked
    float                  truncated toward zero
    str                    length-prefixed UTF-8
    bytes-like             list of per-byte integers
    dataclass instance     struct: field name -> value, canonical order
    Mapping                dict, keys must be str
    list / tuple           list

Anything else is ERR_UNSUPPORTED_TYPE.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from typing import Any

from ._errors import ERR_UNSUPPORTED_TYPE, BencodeSerError


def produce(value: Any, encoder: Any) -> None:
    hook = getattr(type(value), "__bencode__", None)
    if hook is not None:
        hook(value, encoder)
        return

    if value is None:
        encoder.emit_none()
        return

    # bool is a subclass of int, so it has to be caught first or True
    # would quietly encode as i1e.
    if isinstance(value, bool):
        encoder.emit_bool(value)
        return

    # IntEnum and IntFlag members are ints and fall through to the int branch.
    if isinstance(value, enum.Enum) and not isinstance(value, int):
        encoder.unit_variant(value.name)
        return

    if isinstance(value, int):
        if value >= 0:
            encoder.emit_uint(value)
        else:
            encoder.emit_int(value)
        return

    if isinstance(value, float):
        encoder.emit_float(value)
        return

    if isinstance(value, str):
        encoder.emit_str(value)
        return

    if isinstance(value, (bytes, bytearray, memoryview)):
        encoder.emit_bytes(value)
        return

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        _produce_struct(value, encoder)
        return

    if isinstance(value, Mapping):
        encoder.emit_mapping(value.items())
        return

    if isinstance(value, (list, tuple)):
        encoder.emit_seq(value, len(value))
        return

    raise BencodeSerError(ERR_UNSUPPORTED_TYPE,
                          "cannot serialize type {}".format(type(value).__name__))


def _produce_struct(value: Any, encoder: Any) -> None:
    fields = dataclasses.fields(value)
    if not fields:
        # zero-field struct is a unit
        encoder.emit_unit()
        return
    state = encoder.begin_struct(type(value).__name__, len(fields))
    for field in fields:
        encoder.struct_field(state, field.name, getattr(value, field.name))
    encoder.end_struct(state)
