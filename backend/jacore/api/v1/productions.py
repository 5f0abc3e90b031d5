"""Production workflow routes: templates, preparations and work"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from jacore.core.database import get_db
from jacore.domain.productions import ProductionKind
from jacore.schemas.production import (
    CreateTemplateRequest,
    DeriveWorkRequest,
    ProductionDto,
    ProductionParameterDto,
    RecordElementValueRequest,
    StepDto,
    UpdateParameterRequest,
    ValidationResultDto,
)
from jacore.schemas.user import RoleName
from jacore.services.production_service import production_service
from jacore.api.deps import get_current_user, require_roles
from jacore.models.user import User

router = APIRouter()

require_supervisor = require_roles(RoleName.ADMIN.value, RoleName.MANAGEMENT.value)


@router.get("", response_model=List[ProductionDto])
def list_productions(
    kind: Optional[ProductionKind] = None,
    assigned_to: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List productions, newest first, optionally filtered by kind or assignee"""
    return production_service.list_productions(db, kind=kind, assigned_to=assigned_to)


@router.post("/templates", response_model=ProductionDto, status_code=status.HTTP_201_CREATED)
def create_template(
    request: CreateTemplateRequest,
    current_user: User = Depends(require_supervisor),
    db: Session = Depends(get_db),
):
    """Create an empty template"""
    return production_service.create_template(db, request, current_user)


@router.post("/templates/{template_id}/steps", response_model=ProductionDto)
def add_template_step(
    template_id: str,
    step: StepDto,
    current_user: User = Depends(require_supervisor),
    db: Session = Depends(get_db),
):
    """Append a step to a template"""
    return production_service.add_step(db, template_id, step)


@router.post(
    "/templates/{template_id}/preparations",
    response_model=ProductionDto,
    status_code=status.HTTP_201_CREATED,
)
def derive_preparation(
    template_id: str,
    current_user: User = Depends(require_supervisor),
    db: Session = Depends(get_db),
):
    """Derive a preparation from a template"""
    return production_service.derive_preparation(db, template_id)


@router.post(
    "/preparations/{preparation_id}/works",
    response_model=ProductionDto,
    status_code=status.HTTP_201_CREATED,
)
def derive_work(
    preparation_id: str,
    request: DeriveWorkRequest,
    current_user: User = Depends(require_supervisor),
    db: Session = Depends(get_db),
):
    """Derive a work record from a preparation and assign it"""
    return production_service.derive_work(db, preparation_id, request.assigned_to)


@router.post("/works/{work_id}/complete", response_model=ProductionDto)
def complete_work(
    work_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Complete a work record; repeated calls keep the first completion date"""
    return production_service.complete_work(db, work_id, current_user)


@router.put("/works/{work_id}/elements/{element_id}", response_model=ProductionDto)
def record_element_value(
    work_id: str,
    element_id: str,
    request: RecordElementValueRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record the value an operator entered on a UI element"""
    return production_service.record_element_value(db, work_id, element_id, request.value, current_user)


@router.get("/{production_id}", response_model=ProductionDto)
def get_production(
    production_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return production_service.get_production(db, production_id)


@router.get("/{production_id}/validation", response_model=ValidationResultDto)
def validate_production(
    production_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Validate every step of a production"""
    return production_service.validate(db, production_id)


@router.post(
    "/{production_id}/parameters",
    response_model=ProductionDto,
    status_code=status.HTTP_201_CREATED,
)
def add_parameter(
    production_id: str,
    parameter: ProductionParameterDto,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a parameter to a preparation or work"""
    return production_service.add_parameter(db, production_id, parameter, current_user)


@router.put("/{production_id}/parameters/{parameter_id}", response_model=ProductionDto)
def update_parameter(
    production_id: str,
    parameter_id: str,
    request: UpdateParameterRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the value of a parameter"""
    return production_service.update_parameter(db, production_id, parameter_id, request.value, current_user)
