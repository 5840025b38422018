"""Infrastructure adapters for external interfaces."""

from codestruct.infrastructure.adapters.yaml_store import YamlModuleStore

__all__ = [
    "YamlModuleStore",
]
