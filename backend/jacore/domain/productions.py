"""Production records as a tagged variant.

A ``Production`` carries the fields every kind shares and a ``details``
payload whose type is the tag: ``TemplateDetails``, ``PreparationDetails`` or
``WorkDetails``. Kind-specific logic dispatches on that payload type in one
place instead of through subclass overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Union

from jacore.core.timeutils import utcnow
from jacore.domain.elements import Step, ValidationResult, new_id, validate_elements

NAME_MAX_LENGTH = 200
# Leaves room for the " - Preparation" suffix of a derived preparation
TEMPLATE_NAME_MAX_LENGTH = NAME_MAX_LENGTH - len(" - Preparation")


class ProductionKind(str, Enum):
    TEMPLATE = "template"
    PREPARATION = "preparation"
    WORK = "work"


class WorkStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ParameterType(str, Enum):
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    SELECTION = "Selection"


ParameterValue = Union[str, int, float, bool, datetime, None]


def coerce_parameter_value(parameter_type: ParameterType, value: Any) -> ParameterValue:
    """Check a raw value against its declared parameter type.

    Raises:
        ValueError: If the value does not fit the type
    """
    if value is None:
        return None
    if parameter_type == ParameterType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("Number parameter requires a numeric value")
        return value
    if parameter_type == ParameterType.BOOLEAN:
        if not isinstance(value, bool):
            raise ValueError("Boolean parameter requires true or false")
        return value
    if parameter_type == ParameterType.DATETIME:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise ValueError("DateTime parameter requires an ISO-8601 timestamp")
        raise ValueError("DateTime parameter requires an ISO-8601 timestamp")
    if not isinstance(value, str):
        raise ValueError(f"{parameter_type.value} parameter requires a string value")
    return value


@dataclass
class ProductionParameter:
    """Customizable parameter of a preparation or work production."""

    name: str
    parameter_type: ParameterType
    value: ParameterValue = None
    description: Optional[str] = None
    id: str = field(default_factory=new_id)

    def copy(self) -> "ProductionParameter":
        return ProductionParameter(
            name=self.name,
            parameter_type=self.parameter_type,
            value=self.value,
            description=self.description,
        )


@dataclass
class TemplateDetails:
    pass


@dataclass
class PreparationDetails:
    parameters: List[ProductionParameter] = field(default_factory=list)


@dataclass
class WorkDetails:
    assigned_to: str
    start_date: datetime
    status: WorkStatus = WorkStatus.IN_PROGRESS
    completion_date: Optional[datetime] = None
    parameters: List[ProductionParameter] = field(default_factory=list)


ProductionDetails = Union[TemplateDetails, PreparationDetails, WorkDetails]


def kind_of(details: ProductionDetails) -> ProductionKind:
    if isinstance(details, TemplateDetails):
        return ProductionKind.TEMPLATE
    if isinstance(details, PreparationDetails):
        return ProductionKind.PREPARATION
    if isinstance(details, WorkDetails):
        return ProductionKind.WORK
    raise TypeError(f"Unknown production details: {type(details).__name__}")


@dataclass
class Production:
    name: str
    details: ProductionDetails
    description: Optional[str] = None
    created_by: Optional[str] = None
    template_id: Optional[str] = None
    steps: List[Step] = field(default_factory=list)
    is_completed: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)

    @property
    def kind(self) -> ProductionKind:
        return kind_of(self.details)

    @property
    def parameters(self) -> List[ProductionParameter]:
        """Parameters of a preparation or work; templates have none."""
        if self.kind == ProductionKind.TEMPLATE:
            return []
        return self.details.parameters

    def find_parameter(self, parameter_id: str) -> Optional[ProductionParameter]:
        return next((p for p in self.parameters if p.id == parameter_id), None)

    def find_ui_element(self, element_id: str):
        for step in self.steps:
            for element in step.iter_ui_elements():
                if element.id == element_id:
                    return element
        return None

    def touch(self) -> None:
        self.modified_at = utcnow()

    def validate(self) -> ValidationResult:
        """Valid only when every step validates; messages name each bad element."""
        elements = [element for step in self.steps for element in step.iter_ui_elements()]
        result = validate_elements(elements)
        result.is_valid = all(step.validate() for step in self.steps)
        return result
