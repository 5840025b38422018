"""Parent/child index over catalog entries.

Mutable derived view: the catalog index is the source of truth, this graph
is rebuilt from it wholesale after a reload and adjusted incrementally on
single-entry create/update/delete.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codestruct.domain.naming import local_name_of

if TYPE_CHECKING:
    from collections.abc import Iterable

    from codestruct.domain.model.module import Module


@dataclass(slots=True)
class HierarchyGraph:
    """Parent pointers plus parent -> children adjacency.

    Invariants:
    - child c is listed under p ⟺ parent_of(c) == p
    - a parent key may exist before the parent entry is registered
      (created lazily when its first child arrives)

    Attributes:
        _parents: hierarchical_name -> parent hierarchical name (None for roots)
        _children: parent hierarchical name -> child hierarchical names, insertion order
    """

    _parents: dict[str, str | None] = field(default_factory=dict)
    _children: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_modules(cls, modules: Iterable[Module]) -> HierarchyGraph:
        """Build graph from entries."""
        graph = cls()
        graph.rebuild(modules)
        return graph

    def rebuild(self, modules: Iterable[Module]) -> None:
        """Replace all state with the given entries. O(N)."""
        self._parents.clear()
        self._children.clear()
        for module in modules:
            self.register(module)

    def register(self, module: Module) -> None:
        """Add entry. Re-registering moves it to its current parent."""
        if module.hierarchical_name in self._parents:
            self.unregister(module)

        self._parents[module.hierarchical_name] = module.parent
        self._children.setdefault(module.hierarchical_name, [])
        if module.parent is not None:
            self._children.setdefault(module.parent, []).append(module.hierarchical_name)

    def unregister(self, module: Module) -> None:
        """Remove entry and detach it from its parent's child list."""
        self.remove(module.hierarchical_name)

    def remove(self, hierarchical_name: str) -> None:
        """Remove entry by name (no-op if absent).

        The entry's own child list is kept while it still has children,
        so orphans stay discoverable until they are removed too.
        """
        if hierarchical_name not in self._parents:
            return

        parent = self._parents.pop(hierarchical_name)
        if parent is not None:
            siblings = self._children.get(parent)
            if siblings is not None and hierarchical_name in siblings:
                siblings.remove(hierarchical_name)
                if not siblings and parent not in self._parents:
                    del self._children[parent]

        if not self._children.get(hierarchical_name):
            self._children.pop(hierarchical_name, None)

    def reparent(self, module: Module) -> None:
        """Move entry under module.parent."""
        self.register(module)

    def parent_of(self, hierarchical_name: str) -> str | None:
        """Parent pointer. O(1)."""
        return self._parents.get(hierarchical_name)

    def children_of(self, hierarchical_name: str) -> list[str]:
        """Local names of direct children. Empty if none or absent."""
        return [local_name_of(c) for c in self._children.get(hierarchical_name, ())]

    def child_paths_of(self, hierarchical_name: str) -> list[str]:
        """Hierarchical names of direct children."""
        return list(self._children.get(hierarchical_name, ()))

    def has_children(self, hierarchical_name: str) -> bool:
        """Check for at least one child. O(1)."""
        return bool(self._children.get(hierarchical_name))

    def has_cycle(self, candidate: str, proposed_parent: str) -> bool:
        """Check whether placing candidate under proposed_parent closes a loop.

        Walks proposed_parent, its parent, its grandparent, ... iteratively.
        The visited set stops the walk on already-corrupt loops that do not
        involve candidate. No I/O; O(depth).

        Args:
            candidate: Entry being placed
            proposed_parent: Parent it would get

        Returns:
            True if candidate == proposed_parent or candidate is an
            ancestor of proposed_parent.
        """
        visited: set[str] = set()
        current: str | None = proposed_parent
        while current is not None:
            if current == candidate:
                return True
            if current in visited:
                return False
            visited.add(current)
            current = self._parents.get(current)
        return False

    def ancestors_of(self, hierarchical_name: str) -> list[str]:
        """Root-first ancestor chain, excluding the entry itself."""
        chain: list[str] = []
        visited = {hierarchical_name}
        current = self._parents.get(hierarchical_name)
        while current is not None and current not in visited:
            chain.append(current)
            visited.add(current)
            current = self._parents.get(current)
        chain.reverse()
        return chain

    def roots(self) -> list[str]:
        """Entries without parent."""
        return [name for name, parent in self._parents.items() if parent is None]

    def __contains__(self, hierarchical_name: object) -> bool:
        """Entry registered."""
        return hierarchical_name in self._parents

    def __len__(self) -> int:
        """Registered entry count."""
        return len(self._parents)
