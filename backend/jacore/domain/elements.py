"""Step structure of a production: steps, operations, devices and UI elements.

Every element knows how to validate itself and how to clone itself. A clone
copies the configuration (labels, rules, expected values) but not the value
an operator entered, and always gets a fresh id, so a derived production
never shares an object with its source.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union


def new_id() -> str:
    return str(uuid.uuid4())


def _dec(value: Union[int, float]) -> Decimal:
    return Decimal(str(value))


@dataclass
class UIElement:
    """Base for the input elements an operator fills in during work."""

    name: str = ""
    label: str = ""
    description: Optional[str] = None
    help_text: Optional[str] = None
    is_required: bool = False
    is_read_only: bool = False
    id: str = field(default_factory=new_id)

    kind = "ui"

    def validate(self) -> bool:
        raise NotImplementedError

    def clone(self) -> "UIElement":
        raise NotImplementedError

    def record_value(self, value: Any) -> None:
        raise NotImplementedError

    def _base_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "help_text": self.help_text,
            "is_required": self.is_required,
            "is_read_only": self.is_read_only,
        }

    def _check_writable(self) -> None:
        if self.is_read_only:
            raise ValueError(f"'{self.label or self.name}' is read-only")


@dataclass
class CheckBoxElement(UIElement):
    is_checked: bool = False
    expected_value: bool = False

    kind = "checkbox"

    def validate(self) -> bool:
        return not self.is_required or self.is_checked == self.expected_value

    def clone(self) -> "CheckBoxElement":
        return CheckBoxElement(expected_value=self.expected_value, **self._base_fields())

    def record_value(self, value: Any) -> None:
        self._check_writable()
        if not isinstance(value, bool):
            raise ValueError("Checkbox value must be a boolean")
        self.is_checked = value


@dataclass
class NumberBoxElement(UIElement):
    value: float = 0
    min_value: float = 0
    max_value: Optional[float] = None
    expected_value: Optional[float] = None
    tolerance: float = 0
    decimal_places: int = 2
    unit_of_measure: Optional[str] = None

    kind = "number"

    def validate(self) -> bool:
        if not self.is_required and self.value == 0:
            return True

        value = _dec(self.value)
        if value < _dec(self.min_value):
            return False
        if self.max_value is not None and value > _dec(self.max_value):
            return False

        if self.expected_value is not None:
            if abs(value - _dec(self.expected_value)) > _dec(self.tolerance):
                return False

        return True

    def clone(self) -> "NumberBoxElement":
        return NumberBoxElement(
            min_value=self.min_value,
            max_value=self.max_value,
            expected_value=self.expected_value,
            tolerance=self.tolerance,
            decimal_places=self.decimal_places,
            unit_of_measure=self.unit_of_measure,
            **self._base_fields(),
        )

    def record_value(self, value: Any) -> None:
        self._check_writable()
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("Number value must be numeric")
        self.value = value


@dataclass
class TextBoxElement(UIElement):
    value: Optional[str] = None
    expected_value: Optional[str] = None
    case_sensitive: bool = False
    max_length: int = 255
    validation_pattern: Optional[str] = None

    kind = "text"

    def validate(self) -> bool:
        if not self.value:
            return not self.is_required

        if len(self.value) > self.max_length:
            return False

        if self.expected_value:
            if self.case_sensitive:
                matches = self.value == self.expected_value
            else:
                matches = self.value.casefold() == self.expected_value.casefold()
            if not matches:
                return False

        if self.validation_pattern and not re.search(self.validation_pattern, self.value):
            return False

        return True

    def clone(self) -> "TextBoxElement":
        return TextBoxElement(
            expected_value=self.expected_value,
            case_sensitive=self.case_sensitive,
            max_length=self.max_length,
            validation_pattern=self.validation_pattern,
            **self._base_fields(),
        )

    def record_value(self, value: Any) -> None:
        self._check_writable()
        if value is not None and not isinstance(value, str):
            raise ValueError("Text value must be a string")
        self.value = value


@dataclass
class Operation:
    """Basic operation within a step, made of UI elements."""

    name: str
    description: Optional[str] = None
    order_index: int = 0
    ui_elements: List[UIElement] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    kind = "operation"

    def validate(self) -> bool:
        return all(element.validate() for element in self.ui_elements)

    def iter_ui_elements(self) -> Iterator[UIElement]:
        return iter(self.ui_elements)

    def clone(self) -> "Operation":
        return Operation(
            name=self.name,
            description=self.description,
            order_index=self.order_index,
            ui_elements=[element.clone() for element in self.ui_elements],
        )


@dataclass
class DeviceOperation:
    """Operation performed on a specific device."""

    name: str
    description: Optional[str] = None
    order_index: int = 0
    is_custom_operation: bool = False
    device_id: Optional[str] = None
    ui_elements: List[UIElement] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def validate(self) -> bool:
        return all(element.validate() for element in self.ui_elements)

    def clone(self, device_id: str) -> "DeviceOperation":
        return DeviceOperation(
            name=self.name,
            description=self.description,
            order_index=self.order_index,
            is_custom_operation=self.is_custom_operation,
            device_id=device_id,
            ui_elements=[element.clone() for element in self.ui_elements],
        )


@dataclass
class DeviceElement:
    """A physical device used in a step, with its own operations."""

    name: str
    description: Optional[str] = None
    order_index: int = 0
    category: Optional[str] = None
    serial_number: Optional[str] = None
    device_operations: List[DeviceOperation] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    kind = "device"

    def validate(self) -> bool:
        return all(operation.validate() for operation in self.device_operations)

    def iter_ui_elements(self) -> Iterator[UIElement]:
        for operation in self.device_operations:
            yield from operation.ui_elements

    def clone(self) -> "DeviceElement":
        device = DeviceElement(
            name=self.name,
            description=self.description,
            order_index=self.order_index,
            category=self.category,
            serial_number=self.serial_number,
        )
        device.device_operations = [op.clone(device.id) for op in self.device_operations]
        return device


OperationElement = Union[Operation, DeviceElement]


@dataclass
class Step:
    """A step in a production process."""

    name: str
    description: Optional[str] = None
    order_index: int = 0
    operations: List[OperationElement] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def validate(self) -> bool:
        return all(operation.validate() for operation in self.operations)

    def iter_ui_elements(self) -> Iterator[UIElement]:
        for operation in self.operations:
            yield from operation.iter_ui_elements()

    def clone(self) -> "Step":
        return Step(
            name=self.name,
            description=self.description,
            order_index=self.order_index,
            operations=[operation.clone() for operation in self.operations],
        )


@dataclass
class ValidationResult:
    """Outcome of validating a set of UI elements."""

    is_valid: bool = True
    invalid_elements: List[UIElement] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


def validate_elements(elements: Iterable[UIElement]) -> ValidationResult:
    result = ValidationResult()
    for element in elements:
        if not element.validate():
            result.is_valid = False
            result.invalid_elements.append(element)
            result.messages.append(f"'{element.label or element.name}' has an invalid value.")
    return result


def clone_steps(steps: Iterable[Step]) -> List[Step]:
    return [step.clone() for step in sorted(steps, key=lambda s: s.order_index)]
