"""YAML document store.

One `<collection>.yaml` file per collection under a root directory.
Before an existing document is overwritten it is copied to a sibling
`<collection>_backup_<timestamp>.yaml`; the new content is written to a
temporary sibling and moved into place with os.replace, so a crash loses at
most the newest write and never touches existing backups.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import yaml

from codestruct.domain.exceptions import (
    CatalogError,
    DocumentValidationError,
    InvalidDepthError,
    InvalidNameError,
    StorageIOError,
    UnsupportedTypeError,
)
from codestruct.domain.model.configuration import StorageConfig, ValidationConfig
from codestruct.domain.model.document import BackupInfo, Document, DocumentMetadata, StorageStats
from codestruct.domain.model.enums import IssueSeverity, IssueType, ModuleKind
from codestruct.domain.model.integrity import IntegrityIssue
from codestruct.domain.naming import validate_hierarchical_name, validate_name
from codestruct.domain.ports.module_store import ModuleStorePort
from codestruct.domain.serialization import (
    document_to_dict,
    metadata_from_dict,
    module_from_dict,
    normalize_modules,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

SUFFIX = ".yaml"
BACKUP_MARKER = "_backup_"
STAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"
_BACKUP_RE = re.compile(
    r"^(?P<cid>.+)_backup_(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z)"
    r"(?:-(?P<seq>\d+))?\.yaml$"
)
_SEPARATORS_RE = re.compile(r"[/\\]")
_EXTENSION_RE = re.compile(r"\.[^.]+$")
_SUPPORTED_TYPES = frozenset(kind.value for kind in ModuleKind)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _backup_stamp(moment: datetime) -> str:
    """RFC3339 UTC timestamp with ':' and '.' replaced by '-'."""
    return moment.astimezone(UTC).strftime(STAMP_FORMAT)


@dataclass
class YamlModuleStore(ModuleStorePort):
    """ModuleStorePort backed by YAML files.

    Not thread-safe on its own: callers serialize access (Catalog holds a lock).

    Attributes:
        config: Storage settings (root path, backups, validation)
        validation: Naming limits applied by document validation
        clock: Wall clock for metadata and backup names
    """

    config: StorageConfig = field(default_factory=StorageConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    clock: Callable[[], datetime] = _utc_now

    @property
    def root(self) -> Path:
        """Directory holding the documents."""
        return self.config.root_path

    def path_for(self, collection_id: str) -> Path:
        """Document file of a collection."""
        return self.root / f"{collection_id}{SUFFIX}"

    # =========================================================================
    # Collection ids
    # =========================================================================

    def collection_id_for(self, file_path: str) -> str:
        """Transliterate file path: separators -> '_', extension dropped.

        "src/app/models.py" -> "src_app_models". Empty -> default collection.
        """
        stem = _EXTENSION_RE.sub("", _SEPARATORS_RE.sub("_", file_path.strip()))
        return stem or self.config.default_collection

    def list_collections(self) -> list[str]:
        """Existing collection ids, sorted. Backups excluded."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.stem
            for p in self.root.glob(f"*{SUFFIX}")
            if p.is_file() and _BACKUP_RE.match(p.name) is None
        )

    # =========================================================================
    # Read
    # =========================================================================

    def read(self, collection_id: str) -> Document:
        """Load and normalize one document.

        Array-shaped `modules` (older files) and map-shaped `modules` are both
        accepted and normalized to a map keyed by hierarchical name.

        Raises:
            StorageIOError: File unreadable or invalid YAML
            DocumentValidationError: Content violates the document schema
        """
        path = self.path_for(collection_id)
        raw = self._load_raw(path)
        if raw is None:
            logger.debug("collection %s not found, returning empty document", collection_id)
            return Document.empty()

        if not isinstance(raw, dict):
            raise DocumentValidationError(collection_id, ["document must be a mapping"])

        try:
            modules_raw = normalize_modules(raw.get("modules"))
        except ValueError as e:
            raise DocumentValidationError(collection_id, [str(e)]) from e

        is_valid, errors = self.validate_document({"modules": modules_raw})
        if not is_valid:
            raise DocumentValidationError(collection_id, errors)

        modules = {}
        for key, entry in modules_raw.items():
            try:
                module = module_from_dict(entry, key=key)
            except (KeyError, TypeError, ValueError) as e:
                errors.append(f"module {key}: {e}")
                continue
            modules[module.hierarchical_name] = module
        if errors:
            raise DocumentValidationError(collection_id, errors)

        logger.debug("read %d module(s) from %s", len(modules), path)
        return Document(modules=modules, metadata=metadata_from_dict(raw.get("metadata")))

    def _load_raw(self, path: Path) -> Any:
        """Parse YAML file; None when the file does not exist."""
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageIOError(str(path), str(e)) from e

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StorageIOError(str(path), f"invalid YAML: {e}") from e

    # =========================================================================
    # Validate
    # =========================================================================

    def validate_document(self, raw: Mapping[str, object]) -> tuple[bool, list[str]]:
        """Check document schema over every entry.

        Rules: `modules` is a mapping; each entry is a mapping with `name`
        and `type`; `type` is a supported kind; `name` is a valid identifier;
        every key is a valid hierarchical name within the depth limit.

        Returns:
            (is_valid, all violations)
        """
        if not isinstance(raw, dict):
            return False, ["document must be a mapping"]

        if "modules" not in raw:
            return False, ["document is missing the modules field"]

        modules = raw["modules"]
        if not isinstance(modules, dict):
            return False, ["modules must be a mapping keyed by hierarchical name"]

        errors: list[str] = []
        for key, entry in modules.items():
            errors.extend(self._entry_errors(str(key), entry))
        return not errors, errors

    def _entry_errors(self, key: str, entry: object) -> list[str]:
        if not isinstance(entry, dict):
            return [f"module {key}: entry must be a mapping"]

        errors: list[str] = []
        name = entry.get("name")
        if not name or not isinstance(name, str):
            errors.append(f"module {key}: name is missing or not a string")
        else:
            try:
                validate_name(name, max_length=self.validation.max_name_length)
            except InvalidNameError as e:
                errors.append(f"module {key}: {e.reason}")

        type_tag = entry.get("type")
        if not type_tag or not isinstance(type_tag, str):
            errors.append(f"module {key}: type is missing or not a string")
        elif type_tag not in _SUPPORTED_TYPES:
            errors.append(f"module {key}: {UnsupportedTypeError(type_tag)}")

        try:
            validate_hierarchical_name(
                key,
                max_depth=self.validation.max_depth,
                max_length=self.validation.max_name_length,
            )
        except (InvalidDepthError, InvalidNameError) as e:
            errors.append(f"module {key}: {e}")
        return errors

    # =========================================================================
    # Write
    # =========================================================================

    def write(self, collection_id: str, document: Document) -> None:
        """Validate, back up, then replace the document.

        Raises:
            DocumentValidationError: Nothing written
            StorageIOError: Backup or write failed; previous file untouched
        """
        now = self.clock()
        metadata = DocumentMetadata(
            version=document.metadata.version,
            created_at=document.metadata.created_at or now,
            updated_at=now,
            total_modules=len(document),
        )
        raw = document_to_dict(Document(modules=document.modules, metadata=metadata))

        if self.config.validate_on_write:
            is_valid, errors = self.validate_document(raw)
            if not is_valid:
                logger.warning(
                    "refusing to write %s: %d validation error(s)", collection_id, len(errors)
                )
                raise DocumentValidationError(collection_id, errors)

        path = self.path_for(collection_id)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(str(self.root), str(e)) from e

        if path.exists() and self.config.auto_backup:
            self.create_backup(collection_id, now)

        content = yaml.safe_dump(
            raw,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=120,
        )
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageIOError(str(path), str(e)) from e

        logger.info("wrote %d module(s) to %s", len(document), path)

    def delete_collection(self, collection_id: str) -> None:
        """Remove a document file; backups are kept."""
        path = self.path_for(collection_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageIOError(str(path), str(e)) from e
        logger.info("deleted collection %s", collection_id)

    # =========================================================================
    # Backups
    # =========================================================================

    def create_backup(self, collection_id: str, moment: datetime | None = None) -> BackupInfo:
        """Copy current document to a timestamped sibling and rotate.

        Raises:
            StorageIOError: Document missing or copy failed
        """
        source = self.path_for(collection_id)
        moment = moment or self.clock()
        stamp = _backup_stamp(moment)
        target = self.root / f"{collection_id}{BACKUP_MARKER}{stamp}{SUFFIX}"
        seq = 0
        while target.exists():
            seq += 1
            target = self.root / f"{collection_id}{BACKUP_MARKER}{stamp}-{seq}{SUFFIX}"

        try:
            shutil.copy2(source, target)
            size = target.stat().st_size
        except OSError as e:
            raise StorageIOError(str(source), f"backup failed: {e}") from e

        logger.info("backed up %s to %s", source.name, target.name)
        self._rotate_backups(collection_id)
        return BackupInfo(
            collection_id=collection_id,
            path=target,
            size=size,
            created_at=moment.astimezone(UTC),
        )

    def list_backups(self, collection_id: str) -> list[BackupInfo]:
        """Backups of one collection, oldest first."""
        if not self.root.is_dir():
            return []

        found: list[tuple[str, int, BackupInfo]] = []
        for path in self.root.glob(f"{collection_id}{BACKUP_MARKER}*{SUFFIX}"):
            match = _BACKUP_RE.match(path.name)
            if match is None or match["cid"] != collection_id:
                continue
            created = datetime.strptime(match["stamp"], STAMP_FORMAT).replace(tzinfo=UTC)
            info = BackupInfo(
                collection_id=collection_id,
                path=path,
                size=path.stat().st_size,
                created_at=created,
            )
            found.append((match["stamp"], int(match["seq"] or 0), info))

        found.sort(key=lambda item: (item[0], item[1]))
        return [info for _, _, info in found]

    def _rotate_backups(self, collection_id: str) -> None:
        """Delete oldest backups beyond max_backups."""
        backups = self.list_backups(collection_id)
        excess = len(backups) - self.config.max_backups
        for backup in backups[: max(excess, 0)]:
            try:
                backup.path.unlink()
            except OSError as e:
                logger.warning("could not remove old backup %s: %s", backup.path, e)
                continue
            logger.debug("removed old backup %s", backup.path.name)

    # =========================================================================
    # Inspection
    # =========================================================================

    def stats(self) -> StorageStats:
        """Summary over all documents; unreadable documents count as empty."""
        total_modules = 0
        total_size = 0
        last_modified: datetime | None = None
        distribution: dict[str, int] = {}

        collections = self.list_collections()
        for collection_id in collections:
            path = self.path_for(collection_id)
            stat = path.stat()
            total_size += stat.st_size
            modified = datetime.fromtimestamp(stat.st_mtime, UTC)
            if last_modified is None or modified > last_modified:
                last_modified = modified
            try:
                count = len(self.read(collection_id))
            except CatalogError as e:
                logger.warning("skipping unreadable collection %s: %s", collection_id, e)
                count = 0
            distribution[collection_id] = count
            total_modules += count

        backup_count = 0
        if self.root.is_dir():
            backup_count = sum(
                1 for p in self.root.glob(f"*{BACKUP_MARKER}*{SUFFIX}") if _BACKUP_RE.match(p.name)
            )

        return StorageStats(
            total_files=len(collections),
            total_modules=total_modules,
            total_size=total_size,
            backup_count=backup_count,
            last_modified=last_modified,
            file_distribution=distribution,
        )

    def check_files(self) -> list[IntegrityIssue]:
        """Try every document; report the ones that fail to parse or validate."""
        issues: list[IntegrityIssue] = []
        for collection_id in self.list_collections():
            path = str(self.path_for(collection_id))
            try:
                self.read(collection_id)
            except StorageIOError as e:
                issues.append(
                    IntegrityIssue(
                        issue_type=IssueType.CORRUPTED_FILE,
                        severity=IssueSeverity.CRITICAL,
                        description=f"cannot parse {path}: {e.reason}",
                        affected=(path,),
                        suggested_fix="restore the newest backup of this collection",
                    )
                )
            except DocumentValidationError as e:
                issues.append(
                    IntegrityIssue(
                        issue_type=IssueType.INVALID_DATA,
                        severity=IssueSeverity.HIGH,
                        description=f"schema violations in {path}: {'; '.join(e.errors)}",
                        affected=(path,),
                    )
                )
        return issues
