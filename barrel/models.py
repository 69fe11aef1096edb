"""
Data models for barrel export maps.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Union


@dataclass(frozen=True)
class ExportBinding:
    """Where one exported name of a barrel module really comes from.

    Attributes:
        source: Module specifier exactly as written in the barrel
            (relative path or package specifier).
        is_namespace: True when the name is the whole namespace object
            of ``source``.
        original_name: Name as exported by ``source`` (``"default"`` for its
            default export). Only set for non-namespace bindings.
    """

    source: str
    is_namespace: bool
    original_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_namespace and self.original_name is not None:
            raise ValueError(
                f"Namespace binding for {self.source!r} must not carry an original name"
            )
        if not self.is_namespace and not self.original_name:
            raise ValueError(
                f"Named binding for {self.source!r} requires a non-empty original name"
            )

    @classmethod
    def namespace(cls, source: str) -> "ExportBinding":
        return cls(source=source, is_namespace=True)

    @classmethod
    def named(cls, source: str, original_name: str) -> "ExportBinding":
        return cls(source=source, is_namespace=False, original_name=original_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the binding to a JSON-friendly dictionary.

        Namespace bindings omit ``original_name``.
        """
        payload: Dict[str, Any] = {
            "source": self.source,
            "is_namespace": self.is_namespace,
        }
        if not self.is_namespace:
            payload["original_name"] = self.original_name
        return payload


class ExportMap(Mapping[str, ExportBinding]):
    """Read-only mapping of exported name to :class:`ExportBinding`.

    Built from exactly one barrel entry file and shared by reference across
    every caller once cached, so it exposes no mutating operations.
    """

    __slots__ = ("_bindings", "_entry_path")

    def __init__(self, bindings: Mapping[str, ExportBinding], entry_path: str):
        self._bindings = MappingProxyType(dict(bindings))
        self._entry_path = entry_path

    @property
    def entry_path(self) -> str:
        """Resolved path of the entry file this map was built from."""
        return self._entry_path

    def __getitem__(self, name: str) -> ExportBinding:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"ExportMap(entry_path={self._entry_path!r}, size={len(self)})"

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: binding.to_dict() for name, binding in self._bindings.items()}


class _Unusable(Enum):
    UNUSABLE = "unusable"


# Cached outcome for an entry file that could not be read or parsed
UNUSABLE = _Unusable.UNUSABLE

CachedExportMap = Union[ExportMap, _Unusable]
