"""Field-by-field mapping between production domain objects, DTOs and rows"""

import json
from typing import List, Optional

from jacore.core.timeutils import naive_utc
from jacore.domain.elements import (
    CheckBoxElement,
    DeviceElement,
    DeviceOperation,
    NumberBoxElement,
    Operation,
    Step,
    TextBoxElement,
    UIElement,
    new_id,
)
from jacore.domain.productions import (
    PreparationDetails,
    Production,
    ProductionKind,
    ProductionParameter,
    TemplateDetails,
    WorkDetails,
    WorkStatus,
    coerce_parameter_value,
)
from jacore.models.production import ProductionRecord
from jacore.schemas.production import (
    CheckBoxElementDto,
    DeviceElementDto,
    DeviceOperationDto,
    NumberBoxElementDto,
    OperationDto,
    ProductionDto,
    ProductionParameterDto,
    StepDto,
    TextBoxElementDto,
)


def _pick_id(dto_id: Optional[str], keep_ids: bool) -> str:
    return dto_id if keep_ids and dto_id else new_id()


# UI elements

def ui_element_to_dto(element: UIElement):
    common = dict(
        id=element.id,
        name=element.name,
        label=element.label,
        description=element.description,
        help_text=element.help_text,
        is_required=element.is_required,
        is_read_only=element.is_read_only,
    )
    if isinstance(element, CheckBoxElement):
        return CheckBoxElementDto(
            is_checked=element.is_checked,
            expected_value=element.expected_value,
            **common,
        )
    if isinstance(element, NumberBoxElement):
        return NumberBoxElementDto(
            value=element.value,
            min_value=element.min_value,
            max_value=element.max_value,
            expected_value=element.expected_value,
            tolerance=element.tolerance,
            decimal_places=element.decimal_places,
            unit_of_measure=element.unit_of_measure,
            **common,
        )
    if isinstance(element, TextBoxElement):
        return TextBoxElementDto(
            value=element.value,
            expected_value=element.expected_value,
            case_sensitive=element.case_sensitive,
            max_length=element.max_length,
            validation_pattern=element.validation_pattern,
            **common,
        )
    raise TypeError(f"Unknown UI element: {type(element).__name__}")


def ui_element_from_dto(dto, keep_ids: bool = True) -> UIElement:
    common = dict(
        id=_pick_id(dto.id, keep_ids),
        name=dto.name,
        label=dto.label,
        description=dto.description,
        help_text=dto.help_text,
        is_required=dto.is_required,
        is_read_only=dto.is_read_only,
    )
    if isinstance(dto, CheckBoxElementDto):
        return CheckBoxElement(
            is_checked=dto.is_checked,
            expected_value=dto.expected_value,
            **common,
        )
    if isinstance(dto, NumberBoxElementDto):
        return NumberBoxElement(
            value=dto.value,
            min_value=dto.min_value,
            max_value=dto.max_value,
            expected_value=dto.expected_value,
            tolerance=dto.tolerance,
            decimal_places=dto.decimal_places,
            unit_of_measure=dto.unit_of_measure,
            **common,
        )
    if isinstance(dto, TextBoxElementDto):
        return TextBoxElement(
            value=dto.value,
            expected_value=dto.expected_value,
            case_sensitive=dto.case_sensitive,
            max_length=dto.max_length,
            validation_pattern=dto.validation_pattern,
            **common,
        )
    raise TypeError(f"Unknown UI element DTO: {type(dto).__name__}")


# Operations and devices

def operation_to_dto(operation):
    if isinstance(operation, Operation):
        return OperationDto(
            id=operation.id,
            name=operation.name,
            description=operation.description,
            order_index=operation.order_index,
            ui_elements=[ui_element_to_dto(e) for e in operation.ui_elements],
        )
    if isinstance(operation, DeviceElement):
        return DeviceElementDto(
            id=operation.id,
            name=operation.name,
            description=operation.description,
            order_index=operation.order_index,
            category=operation.category,
            serial_number=operation.serial_number,
            device_operations=[
                DeviceOperationDto(
                    id=op.id,
                    name=op.name,
                    description=op.description,
                    order_index=op.order_index,
                    is_custom_operation=op.is_custom_operation,
                    device_id=op.device_id,
                    ui_elements=[ui_element_to_dto(e) for e in op.ui_elements],
                )
                for op in operation.device_operations
            ],
        )
    raise TypeError(f"Unknown operation: {type(operation).__name__}")


def operation_from_dto(dto, keep_ids: bool = True):
    if isinstance(dto, OperationDto):
        return Operation(
            id=_pick_id(dto.id, keep_ids),
            name=dto.name,
            description=dto.description,
            order_index=dto.order_index,
            ui_elements=[ui_element_from_dto(e, keep_ids) for e in dto.ui_elements],
        )
    if isinstance(dto, DeviceElementDto):
        device = DeviceElement(
            id=_pick_id(dto.id, keep_ids),
            name=dto.name,
            description=dto.description,
            order_index=dto.order_index,
            category=dto.category,
            serial_number=dto.serial_number,
        )
        device.device_operations = [
            DeviceOperation(
                id=_pick_id(op.id, keep_ids),
                name=op.name,
                description=op.description,
                order_index=op.order_index,
                is_custom_operation=op.is_custom_operation,
                device_id=device.id,
                ui_elements=[ui_element_from_dto(e, keep_ids) for e in op.ui_elements],
            )
            for op in dto.device_operations
        ]
        return device
    raise TypeError(f"Unknown operation DTO: {type(dto).__name__}")


# Steps

def step_to_dto(step: Step) -> StepDto:
    return StepDto(
        id=step.id,
        name=step.name,
        description=step.description,
        order_index=step.order_index,
        operations=[operation_to_dto(op) for op in step.operations],
    )


def step_from_dto(dto: StepDto, keep_ids: bool = True) -> Step:
    return Step(
        id=_pick_id(dto.id, keep_ids),
        name=dto.name,
        description=dto.description,
        order_index=dto.order_index,
        operations=[operation_from_dto(op, keep_ids) for op in dto.operations],
    )


# Parameters

def parameter_to_dto(parameter: ProductionParameter) -> ProductionParameterDto:
    return ProductionParameterDto(
        id=parameter.id,
        name=parameter.name,
        value=parameter.value,
        parameter_type=parameter.parameter_type,
        description=parameter.description,
    )


def parameter_from_dto(dto: ProductionParameterDto, keep_ids: bool = True) -> ProductionParameter:
    """Raises ValueError if the value does not fit the parameter type."""
    return ProductionParameter(
        id=_pick_id(dto.id, keep_ids),
        name=dto.name.strip(),
        parameter_type=dto.parameter_type,
        value=coerce_parameter_value(dto.parameter_type, dto.value),
        description=dto.description,
    )


# Productions

def production_to_dto(production: Production) -> ProductionDto:
    details = production.details
    dto = ProductionDto(
        id=production.id,
        kind=production.kind,
        name=production.name,
        description=production.description,
        created_by=production.created_by,
        template_id=production.template_id,
        is_completed=production.is_completed,
        created_at=production.created_at,
        modified_at=production.modified_at,
        steps=[step_to_dto(s) for s in production.steps],
        parameters=[parameter_to_dto(p) for p in production.parameters],
    )
    if isinstance(details, WorkDetails):
        dto.assigned_to = details.assigned_to
        dto.start_date = details.start_date
        dto.completion_date = details.completion_date
        dto.status = details.status
    return dto


def _dump_steps(steps: List[Step]) -> str:
    return json.dumps([step_to_dto(s).model_dump(mode="json") for s in steps])


def _load_steps(raw: Optional[str]) -> List[Step]:
    return [step_from_dto(StepDto.model_validate(item)) for item in json.loads(raw or "[]")]


def _dump_parameters(parameters: List[ProductionParameter]) -> str:
    return json.dumps([parameter_to_dto(p).model_dump(mode="json") for p in parameters])


def _load_parameters(raw: Optional[str]) -> List[ProductionParameter]:
    return [
        parameter_from_dto(ProductionParameterDto.model_validate(item))
        for item in json.loads(raw or "[]")
    ]


def production_to_record(
    production: Production,
    record: Optional[ProductionRecord] = None
) -> ProductionRecord:
    """Write every field of a production onto a (new or existing) row."""
    record = record or ProductionRecord(id=production.id)
    details = production.details

    record.kind = production.kind.value
    record.name = production.name
    record.description = production.description
    record.created_by = production.created_by
    record.template_id = production.template_id
    record.is_completed = production.is_completed
    record.created_at = production.created_at
    record.modified_at = production.modified_at
    record.steps_json = _dump_steps(production.steps)

    if isinstance(details, TemplateDetails):
        record.parameters_json = None
        record.assigned_to = None
        record.start_date = None
        record.completion_date = None
        record.status = None
    elif isinstance(details, PreparationDetails):
        record.parameters_json = _dump_parameters(details.parameters)
        record.assigned_to = None
        record.start_date = None
        record.completion_date = None
        record.status = None
    elif isinstance(details, WorkDetails):
        record.parameters_json = _dump_parameters(details.parameters)
        record.assigned_to = details.assigned_to
        record.start_date = details.start_date
        record.completion_date = details.completion_date
        record.status = details.status.value
    else:
        raise TypeError(f"Unknown production details: {type(details).__name__}")

    return record


def production_from_record(record: ProductionRecord) -> Production:
    kind = ProductionKind(record.kind)
    if kind == ProductionKind.TEMPLATE:
        details = TemplateDetails()
    elif kind == ProductionKind.PREPARATION:
        details = PreparationDetails(parameters=_load_parameters(record.parameters_json))
    else:
        details = WorkDetails(
            assigned_to=record.assigned_to,
            start_date=naive_utc(record.start_date),
            status=WorkStatus(record.status),
            completion_date=naive_utc(record.completion_date),
            parameters=_load_parameters(record.parameters_json),
        )

    return Production(
        id=record.id,
        name=record.name,
        details=details,
        description=record.description,
        created_by=record.created_by,
        template_id=record.template_id,
        steps=_load_steps(record.steps_json),
        is_completed=record.is_completed,
        created_at=naive_utc(record.created_at),
        modified_at=naive_utc(record.modified_at),
    )
