"""Catalog of filterable employee fields.

The catalog is supplied by the listing server (``filter_fields_config``) or
loaded from the packaged ``filter_fields.yaml``. Its shape is::

    {group_key: {field_key: {"type": ..., "label": ..., "options": [...]}}}

The engine only reads it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from roster.config.config_loader import load_filter_fields
from roster.config.logging_config import get_logger

logger = get_logger("field_schema")


class FieldType(str, Enum):
    """Declared type of a filterable field."""

    TEXT = "text"
    SELECT = "select"
    DATE = "date"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FieldConfig:
    """Configuration for one filterable field."""

    key: str
    label: str
    type: Optional[FieldType]
    group: str
    options: List[str] = field(default_factory=list)
    # Type string as declared, kept for diagnostics when it is not a FieldType
    declared_type: str = ""


@dataclass(frozen=True)
class FieldGroup:
    """A labelled category of fields."""

    key: str
    label: str
    fields: List[FieldConfig]


class FieldSchema:
    """Read-only, grouped catalog of filterable fields."""

    def __init__(self, groups: List[FieldGroup]):
        self._groups = list(groups)
        self._fields: Dict[str, FieldConfig] = {}
        for group in self._groups:
            for cfg in group.fields:
                self._fields[cfg.key] = cfg

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Mapping[str, Mapping[str, Any]]],
        group_labels: Optional[Mapping[str, str]] = None,
    ) -> "FieldSchema":
        """
        Parse a ``{group: {field: {...}}}`` mapping.

        Fields declaring an unrecognized type are kept with ``type=None`` and
        logged, so operator resolution can decide what to do with them.

        Args:
            config: Grouped field configuration.
            group_labels: Optional display labels per group key.

        Returns:
            Parsed FieldSchema.
        """
        labels = dict(group_labels or {})
        groups = []
        if not isinstance(config or {}, Mapping):
            logger.warning(f"Ignoring field configuration of type {type(config).__name__}")
            return cls(groups)

        for group_key, group_fields in (config or {}).items():
            if not isinstance(group_fields or {}, Mapping):
                logger.warning(f"Skipping field group {group_key!r}: expected a mapping of fields")
                continue
            parsed = []
            for field_key, raw in (group_fields or {}).items():
                raw = raw or {}
                if not isinstance(raw, Mapping):
                    logger.warning(f"Skipping field {field_key!r} in group {group_key!r}: expected a mapping")
                    continue
                options = raw.get("options") or []
                if not isinstance(options, (list, tuple)):
                    logger.warning(f"Ignoring non-list options of field {field_key!r}")
                    options = []
                declared = str(raw.get("type", "text"))
                try:
                    field_type: Optional[FieldType] = FieldType(declared)
                except ValueError:
                    logger.warning(
                        f"Field {field_key!r} in group {group_key!r} has unrecognized type {declared!r}"
                    )
                    field_type = None
                parsed.append(FieldConfig(
                    key=field_key,
                    label=str(raw.get("label", field_key)),
                    type=field_type,
                    group=group_key,
                    options=[str(o) for o in options],
                    declared_type=declared,
                ))
            label = labels.get(group_key) or group_key.replace("_", " ").title()
            groups.append(FieldGroup(key=group_key, label=label, fields=parsed))
        return cls(groups)

    @property
    def groups(self) -> List[FieldGroup]:
        return list(self._groups)

    @property
    def fields(self) -> Dict[str, FieldConfig]:
        return dict(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, key: str) -> Optional[FieldConfig]:
        """Get a field's configuration, or None if the key is not in the catalog."""
        return self._fields.get(key)

    def label_for(self, key: str) -> str:
        """Display label for a field, falling back to the raw key."""
        cfg = self._fields.get(key)
        return cfg.label if cfg else key

    def type_for(self, key: str) -> Optional[FieldType]:
        cfg = self._fields.get(key)
        return cfg.type if cfg else None

    def group_label(self, group_key: str) -> str:
        for group in self._groups:
            if group.key == group_key:
                return group.label
        return group_key

    def search(self, term: str) -> List[FieldGroup]:
        """
        Filter the catalog by a search term.

        A field matches when its label or key contains the term, or when its
        group's label does; matching is case-insensitive. Groups with no
        matching field are dropped.

        Args:
            term: Search text; blank returns every group.

        Returns:
            Groups holding only their matching fields, in catalog order.
        """
        if not term:
            return self.groups

        needle = term.lower()
        result = []
        for group in self._groups:
            group_match = needle in group.label.lower()
            matching = [
                cfg for cfg in group.fields
                if group_match or needle in cfg.label.lower() or needle in cfg.key.lower()
            ]
            if matching:
                result.append(FieldGroup(key=group.key, label=group.label, fields=matching))
        return result


def load_default_schema() -> FieldSchema:
    """Build the schema from the packaged filter_fields.yaml."""
    data = load_filter_fields()
    return FieldSchema.from_config(data.get("fields", {}), data.get("group_labels", {}))
