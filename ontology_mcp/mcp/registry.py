"""
Tool Registry
=============

Ordered, read-only catalog of tool descriptors. Built once at startup from
the per-backend modules in ``ontology_mcp.mcp.tools``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .models import ToolDescriptor

logger = logging.getLogger("ontology_mcp.mcp.registry")


class ToolRegistry:
    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()):
        self._tools: Dict[str, ToolDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: ToolDescriptor) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Duplicate tool name: {descriptor.name}")
        self._tools[descriptor.name] = descriptor
        logger.debug(f"Registered tool {descriptor.name}")

    # =========================================================================
    # Lookup
    # =========================================================================

    def list_tools(self) -> List[Dict[str, Any]]:
        """``{name, description, inputSchema}`` for every tool, in registration order."""
        return [d.to_listing() for d in self._tools.values()]

    def find_tool(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def validate_required(self, descriptor: ToolDescriptor, arguments: Optional[Mapping[str, Any]]) -> List[str]:
        return validate_required(descriptor, arguments)

    def names(self) -> List[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())


def validate_required(descriptor: ToolDescriptor, arguments: Optional[Mapping[str, Any]]) -> List[str]:
    """Names of required arguments that are absent from ``arguments``.

    Only key presence is checked; a key set to None counts as given and
    declared types, enums or ranges are not enforced.
    """
    present = arguments or {}
    return [name for name in descriptor.required if name not in present]
