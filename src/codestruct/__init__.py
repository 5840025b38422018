"""codestruct - hierarchical catalog of code elements with YAML persistence."""

__version__ = "0.1.0"

from codestruct.application.services import Catalog
from codestruct.domain.model import CatalogConfig, CreateRequest, SearchCriteria
from codestruct.infrastructure.adapters import YamlModuleStore
from codestruct.infrastructure.config_loader import config_from_env, load_config

__all__ = [
    "Catalog",
    "CatalogConfig",
    "CreateRequest",
    "SearchCriteria",
    "YamlModuleStore",
    "__version__",
    "config_from_env",
    "load_config",
]
