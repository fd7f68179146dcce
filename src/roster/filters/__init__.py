"""Advanced filter conditions, field catalog and panel logic."""

from .values import (
    EMPTY,
    Empty,
    TextValue,
    SelectValue,
    DateRange,
    BoolValue,
    FilterValue,
    is_empty,
    to_wire,
    from_wire,
)
from .field_schema import FieldType, FieldConfig, FieldGroup, FieldSchema, load_default_schema
from .operators import (
    Operator,
    OPERATORS,
    NULLARY_OPERATORS,
    LIST_OPERATORS,
    RANGE_OPERATORS,
    operators_for_type,
    default_operator,
    resolve_operators,
    operator_label,
    operator_symbol,
)
from .conditions import (
    FilterCondition,
    new_condition,
    is_valid,
    valid_conditions,
    serialize_conditions,
)
from .value_editor import ValueControl, control_for
from .filter_model import FilterModel
from .builder import FilterBuilder
