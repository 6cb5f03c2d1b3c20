"""
Interface for unit manager clients.

A client lists the units known to the init system and reads single typed
properties from them. Property values come back as a tagged variant so the
collector can tell unsigned 64-bit integers apart from everything else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Union

# D-Bus signature of an unsigned 64-bit integer
UINT64_SIGNATURE = "t"


@dataclass(frozen=True)
class UnitStatus:
    """One row of the unit manager's unit listing."""

    name: str
    description: str = ""
    load_state: str = ""
    active_state: str = ""
    sub_state: str = ""
    path: str = ""


@dataclass(frozen=True)
class IntegerValue:
    """An unsigned 64-bit property value."""

    value: int


@dataclass(frozen=True)
class OtherValue:
    """A property value of any type the collector does not export."""

    signature: str
    value: Any


PropertyValue = Union[IntegerValue, OtherValue]


def property_value(signature: str, value: Any) -> PropertyValue:
    """Tag a raw (signature, value) variant."""
    if signature == UINT64_SIGNATURE and isinstance(value, int):
        return IntegerValue(value)
    return OtherValue(signature, value)


class UnitManagerClient(ABC):
    """
    Abstract base class for unit manager clients.

    Implementations must:
    - list_units(): raise UnitQueryError when the listing fails
    - get_typed_property(): raise PropertyError when the unit or property is
      unknown or the call fails
    - close(): release the connection; safe to call more than once
    """

    @abstractmethod
    def list_units(self) -> list[UnitStatus]:
        """List every unit currently loaded by the unit manager."""

    @abstractmethod
    def get_typed_property(
        self, unit_name: str, unit_type: str, property_name: str
    ) -> PropertyValue:
        """Read one property from the unit type's interface."""

    @abstractmethod
    def close(self) -> None:
        """Close the underlying connection."""

    def __enter__(self) -> UnitManagerClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
