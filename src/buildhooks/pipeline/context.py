"""Execution context for hook invocations.

Provides a typed interface to the data the host hands to a hook for one
pipeline step: mapped (named) values, unmapped (raw) values and their
rollback counterparts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from buildhooks.errors import HookFailure

HEADER_KEY_PREFIX = "header"


def parse_header(value: str) -> tuple[str, str]:
    """Split a ``Name: value`` string on its first colon.

    Args:
        value: Raw header definition

    Returns:
        Tuple of (name, value); value is empty if there is no colon
    """
    name, _, header_value = value.partition(":")
    return name.strip(), header_value.strip()


def probe_headers(mapped: Mapping[str, str]) -> list[tuple[str, str]]:
    """Collect headers from sequential ``header1``, ``header2``, ... keys.

    Probing stops at the first missing index.
    """
    headers = []
    i = 1
    while f"{HEADER_KEY_PREFIX}{i}" in mapped:
        headers.append(parse_header(mapped[f"{HEADER_KEY_PREFIX}{i}"]))
        i += 1
    return headers


@dataclass(frozen=True)
class DataChannel:
    """One direction of hook data (forward or rollback).

    Attributes:
        mapped: Named key -> string values
        unmapped: Ordered raw string values
        headers: Ordered header name/value pairs
    """

    mapped: dict[str, str] = field(default_factory=dict)
    unmapped: list[str] = field(default_factory=list)
    headers: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_values(
        cls,
        mapped: Mapping[str, Any] | None = None,
        unmapped: Iterable[Any] | None = None,
        headers: Iterable[Any] | None = None,
    ) -> DataChannel:
        """Create a channel from loosely typed values.

        Values are coerced to strings. When no explicit header list is given,
        headers are probed from the ``headerN`` keys of the mapped values.

        Args:
            mapped: Named values
            unmapped: Raw values
            headers: Explicit headers, either ``"Name: value"`` strings or
                (name, value) pairs

        Returns:
            DataChannel instance

        Raises:
            ValueError: If mapped is not a mapping
        """
        if mapped is not None and not isinstance(mapped, Mapping):
            raise ValueError(f"Mapped values must be a mapping, got {type(mapped).__name__}")
        # a lone string is a single value, not a sequence of characters
        if isinstance(unmapped, str):
            unmapped = [unmapped]
        if isinstance(headers, str):
            headers = [headers]

        mapped_data = {str(k): "" if v is None else str(v) for k, v in (mapped or {}).items()}
        unmapped_data = [str(v) for v in (unmapped or [])]

        if headers is None:
            header_pairs = probe_headers(mapped_data)
        else:
            header_pairs = []
            for header in headers:
                if isinstance(header, str):
                    header_pairs.append(parse_header(header))
                else:
                    name, value = header
                    header_pairs.append((str(name), "" if value is None else str(value)))

        return cls(mapped=mapped_data, unmapped=unmapped_data, headers=header_pairs)

    def has_mapped_data(self) -> bool:
        return bool(self.mapped)

    def has_unmapped_data(self) -> bool:
        return bool(self.unmapped)

    def contains(self, key: str) -> bool:
        return key in self.mapped

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a mapped value.

        Args:
            key: Value name
            default: Returned if the key is absent

        Returns:
            Value or default
        """
        return self.mapped.get(key, default)

    def require(self, key: str, description: str | None = None) -> str:
        """Get a mapped value that must be present.

        Args:
            key: Value name
            description: Human-readable name for the error message

        Returns:
            The value

        Raises:
            HookFailure: If the key is absent
        """
        if key not in self.mapped:
            raise HookFailure(f"Missing required value '{key}'" + (f" ({description})" if description else ""))
        return self.mapped[key]


@dataclass(frozen=True)
class ExecutionContext:
    """Data the host supplies for one hook invocation.

    Attributes:
        step_id: Composite pipeline step identifier (e.g. ``exec[deploy]``)
        data: Forward data channel
        rollback_data: Rollback data channel
    """

    step_id: str = ""
    data: DataChannel = field(default_factory=DataChannel)
    rollback_data: DataChannel = field(default_factory=DataChannel)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExecutionContext:
        """Create an ExecutionContext from a plain mapping.

        Args:
            data: Mapping with structure:
                - step_id: str
                - data: {mapped: dict, unmapped: list, headers: list (optional)}
                - rollback: same structure as data

        Returns:
            ExecutionContext instance
        """
        return cls(
            step_id=str(data.get("step_id", "")),
            data=_channel_from_dict(data.get("data") or {}),
            rollback_data=_channel_from_dict(data.get("rollback") or {}),
        )

    def channel(self, rollback: bool = False) -> DataChannel:
        """Get the forward or rollback data channel."""
        return self.rollback_data if rollback else self.data

    def has_mapped_data(self) -> bool:
        return self.data.has_mapped_data()

    def has_unmapped_data(self) -> bool:
        return self.data.has_unmapped_data()

    def has_mapped_rollback_data(self) -> bool:
        return self.rollback_data.has_mapped_data()

    def has_unmapped_rollback_data(self) -> bool:
        return self.rollback_data.has_unmapped_data()


def _channel_from_dict(data: Mapping[str, Any]) -> DataChannel:
    if not isinstance(data, Mapping):
        raise ValueError(f"Channel data must be a mapping, got {type(data).__name__}")
    return DataChannel.from_values(
        mapped=data.get("mapped"),
        unmapped=data.get("unmapped"),
        headers=data.get("headers"),
    )
