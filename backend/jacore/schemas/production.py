"""Production schemas"""

import re
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, field_validator

from jacore.domain.productions import (
    TEMPLATE_NAME_MAX_LENGTH,
    ParameterType,
    ProductionKind,
    WorkStatus,
)
from jacore.schemas.common import CamelModel


class UIElementBaseDto(CamelModel):
    id: Optional[str] = None
    name: str = Field("", max_length=200)
    label: str = Field("", max_length=200)
    description: Optional[str] = None
    help_text: Optional[str] = None
    is_required: bool = False
    is_read_only: bool = False


class CheckBoxElementDto(UIElementBaseDto):
    kind: Literal["checkbox"] = "checkbox"
    is_checked: bool = False
    expected_value: bool = False


class NumberBoxElementDto(UIElementBaseDto):
    kind: Literal["number"] = "number"
    value: float = 0
    min_value: float = 0
    max_value: Optional[float] = None
    expected_value: Optional[float] = None
    tolerance: float = Field(0, ge=0)
    decimal_places: int = Field(2, ge=0, le=10)
    unit_of_measure: Optional[str] = None


class TextBoxElementDto(UIElementBaseDto):
    kind: Literal["text"] = "text"
    value: Optional[str] = None
    expected_value: Optional[str] = None
    case_sensitive: bool = False
    max_length: int = Field(255, ge=1)
    validation_pattern: Optional[str] = None

    @field_validator('validation_pattern')
    @classmethod
    def pattern_compiles(cls, v):
        if v:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f'Invalid validation pattern: {exc}')
        return v


UIElementDto = Annotated[
    Union[CheckBoxElementDto, NumberBoxElementDto, TextBoxElementDto],
    Field(discriminator="kind"),
]


class OperationDto(CamelModel):
    kind: Literal["operation"] = "operation"
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = 0
    ui_elements: List[UIElementDto] = []


class DeviceOperationDto(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = 0
    is_custom_operation: bool = False
    device_id: Optional[str] = None
    ui_elements: List[UIElementDto] = []


class DeviceElementDto(CamelModel):
    kind: Literal["device"] = "device"
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = 0
    category: Optional[str] = None
    serial_number: Optional[str] = None
    device_operations: List[DeviceOperationDto] = []


OperationElementDto = Annotated[
    Union[OperationDto, DeviceElementDto],
    Field(discriminator="kind"),
]


class StepDto(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = 0
    operations: List[OperationElementDto] = []


class ProductionParameterDto(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    value: Union[bool, int, float, datetime, str, None] = None
    parameter_type: ParameterType
    description: Optional[str] = None


class ProductionDto(CamelModel):
    """Production response schema; work-only fields are null for other kinds"""
    id: str
    kind: ProductionKind
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    template_id: Optional[str] = None
    is_completed: bool = False
    created_at: datetime
    modified_at: datetime
    steps: List[StepDto] = []
    parameters: List[ProductionParameterDto] = []
    assigned_to: Optional[str] = None
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    status: Optional[WorkStatus] = None


class CreateTemplateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=TEMPLATE_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required.')
        return v


class DeriveWorkRequest(CamelModel):
    assigned_to: str = Field(..., min_length=1, max_length=255)


class UpdateParameterRequest(CamelModel):
    value: Union[bool, int, float, datetime, str, None] = None


class RecordElementValueRequest(CamelModel):
    value: Union[bool, int, float, str, None] = None


class ValidationResultDto(CamelModel):
    is_valid: bool
    messages: List[str] = []
