from __future__ import annotations

from enum import Enum


class ParamKind(str, Enum):
    """
    Supported condition parameter kinds.

    Related: .param_def, ..value_objects.condition
    """

    INT = "int"
    FLOAT = "float"
    ENUM = "enum"
