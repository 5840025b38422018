"""Domain ports (interfaces)."""

from codestruct.domain.ports.module_store import ModuleStorePort

__all__ = ["ModuleStorePort"]
