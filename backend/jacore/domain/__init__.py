"""Production domain: step structure and the production tagged variant"""

from jacore.domain.elements import (
    CheckBoxElement,
    DeviceElement,
    DeviceOperation,
    NumberBoxElement,
    Operation,
    Step,
    TextBoxElement,
    UIElement,
    ValidationResult,
)
from jacore.domain.productions import (
    ParameterType,
    PreparationDetails,
    Production,
    ProductionKind,
    ProductionParameter,
    TemplateDetails,
    WorkDetails,
    WorkStatus,
)

__all__ = [
    "CheckBoxElement", "DeviceElement", "DeviceOperation", "NumberBoxElement", "Operation",
    "Step", "TextBoxElement", "UIElement", "ValidationResult",
    "ParameterType", "PreparationDetails", "Production", "ProductionKind", "ProductionParameter",
    "TemplateDetails", "WorkDetails", "WorkStatus",
]
