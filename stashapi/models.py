"""Data records exchanged by the HTTP services and their clients."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

USIZE_MAX = 2**64 - 1

USize = Annotated[int, Field(ge=0, le=USIZE_MAX)]
I16 = Annotated[int, Field(ge=-(2**15), le=2**15 - 1)]
I32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]
I64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class _Record(BaseModel):
    model_config = ConfigDict(strict=True)


class Item(_Record):
    """An item kept in the key-value store."""

    id: USize
    name: str
    description: str
    count: USize
    height: USize
    weight: USize


class CreateItemPayload(_Record):
    """The fields of an item that a client supplies."""

    name: str
    description: str
    count: USize
    height: USize
    weight: USize


class Datas(_Record):
    """A row of the datas table."""

    id: I32
    name: str
    flags: I64
    sys: I16


class DatasPayload(_Record):
    """The fields of a datas row that a client supplies."""

    name: str
    flags: I64
    sys: I16


class Niceties(_Record):
    """A row of the niceties table."""

    id: I32
    datas_id: I32
    mem: I64
    stack: I16
    info: str


class NicetiesPayload(_Record):
    """The fields of a niceties row that a client supplies."""

    datas_id: I32
    mem: I64
    stack: I16
    info: str