"""Production service - orchestrates the factory and the repository"""

from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from jacore.core.exceptions import (
    AuthorizationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from jacore.domain.productions import (
    Production,
    ProductionKind,
    WorkStatus,
    coerce_parameter_value,
)
from jacore.mappers.productions import (
    parameter_from_dto,
    production_to_dto,
    step_from_dto,
)
from jacore.models.user import User
from jacore.repositories.productions import ProductionRepository
from jacore.schemas.production import (
    CreateTemplateRequest,
    ProductionDto,
    ProductionParameterDto,
    StepDto,
    ValidationResultDto,
)
from jacore.schemas.user import RoleName
from jacore.services.production_factory import ProductionFactory

logger = logging.getLogger(__name__)

SUPERVISOR_ROLES = (RoleName.ADMIN.value, RoleName.MANAGEMENT.value)


class ProductionService:
    """Production workflow operations.

    Each call commits once at the end; a failure raised before that point
    leaves the database untouched.
    """

    @staticmethod
    def _load(repository: ProductionRepository, production_id: str) -> Production:
        production = repository.get(production_id)
        if production is None:
            raise ResourceNotFoundError("Production")
        return production

    @staticmethod
    def _load_work(repository: ProductionRepository, work_id: str, current_user: User) -> Production:
        work = repository.get_work(work_id)
        if work is None:
            raise ResourceNotFoundError("Work")
        ProductionService._ensure_can_operate(work, current_user)
        return work

    @staticmethod
    def _ensure_can_operate(work: Production, current_user: User) -> None:
        """Work is edited by its assignee or by a supervisor"""
        if any(current_user.has_role(role) for role in SUPERVISOR_ROLES):
            return
        if work.details.assigned_to.strip().lower() != current_user.email.lower():
            raise AuthorizationError("Work is assigned to another user")

    @staticmethod
    def _ensure_can_edit_parameters(production: Production, current_user: User) -> None:
        """Preparations are edited by supervisors; work by its operator until completed"""
        if production.kind == ProductionKind.TEMPLATE:
            raise ValidationError("Templates do not carry parameters.")
        if production.kind == ProductionKind.PREPARATION:
            if not any(current_user.has_role(role) for role in SUPERVISOR_ROLES):
                raise AuthorizationError("Only supervisors can change preparation parameters")
            return
        ProductionService._ensure_can_operate(production, current_user)
        if production.is_completed:
            raise ValidationError("Work is already completed.")

    @staticmethod
    def _save(db: Session, repository: ProductionRepository, production: Production) -> ProductionDto:
        production.touch()
        repository.save(production)
        db.commit()
        return production_to_dto(production)

    @staticmethod
    def create_template(db: Session, request: CreateTemplateRequest, current_user: User) -> ProductionDto:
        repository = ProductionRepository(db)
        template = ProductionFactory(repository).create_template(
            request.name, current_user.email, request.description
        )
        repository.save(template)
        db.commit()
        logger.info(f"Template {template.id} '{template.name}' created by {current_user.email}")
        return production_to_dto(template)

    @staticmethod
    def add_step(db: Session, template_id: str, step: StepDto) -> ProductionDto:
        """Append a step to a template; ids in the payload are replaced"""
        repository = ProductionRepository(db)
        template = repository.get_template(template_id)
        if template is None:
            raise ResourceNotFoundError("Template")

        new_step = step_from_dto(step, keep_ids=False)
        if step.order_index == 0 and template.steps:
            new_step.order_index = max(s.order_index for s in template.steps) + 1
        template.steps.append(new_step)
        template.steps.sort(key=lambda s: s.order_index)
        return ProductionService._save(db, repository, template)

    @staticmethod
    def derive_preparation(db: Session, template_id: str) -> ProductionDto:
        repository = ProductionRepository(db)
        preparation = ProductionFactory(repository).derive_from_template(template_id)
        repository.save(preparation)
        db.commit()
        return production_to_dto(preparation)

    @staticmethod
    def derive_work(db: Session, preparation_id: str, assigned_to: str) -> ProductionDto:
        repository = ProductionRepository(db)
        work = ProductionFactory(repository).derive_from_preparation(preparation_id, assigned_to)
        repository.save(work)
        db.commit()
        return production_to_dto(work)

    @staticmethod
    def add_parameter(
        db: Session,
        production_id: str,
        parameter: ProductionParameterDto,
        current_user: User,
    ) -> ProductionDto:
        """
        Add a parameter to a preparation or work

        Raises:
            ValidationError: On templates, or if the value does not fit its type
            ResourceAlreadyExistsError: If the name is already used
        """
        repository = ProductionRepository(db)
        production = ProductionService._load(repository, production_id)
        ProductionService._ensure_can_edit_parameters(production, current_user)

        name = parameter.name.strip()
        if any(p.name.lower() == name.lower() for p in production.parameters):
            raise ResourceAlreadyExistsError(f"Parameter '{name}'")

        try:
            new_parameter = parameter_from_dto(parameter, keep_ids=False)
        except ValueError as exc:
            raise ValidationError(str(exc), details={"parameter": name})

        production.details.parameters.append(new_parameter)
        return ProductionService._save(db, repository, production)

    @staticmethod
    def update_parameter(
        db: Session,
        production_id: str,
        parameter_id: str,
        value,
        current_user: User,
    ) -> ProductionDto:
        repository = ProductionRepository(db)
        production = ProductionService._load(repository, production_id)
        ProductionService._ensure_can_edit_parameters(production, current_user)

        parameter = production.find_parameter(parameter_id)
        if parameter is None:
            raise ResourceNotFoundError("Parameter")

        try:
            parameter.value = coerce_parameter_value(parameter.parameter_type, value)
        except ValueError as exc:
            raise ValidationError(str(exc), details={"parameter": parameter.name})

        return ProductionService._save(db, repository, production)

    @staticmethod
    def record_element_value(
        db: Session,
        work_id: str,
        element_id: str,
        value,
        current_user: User,
    ) -> ProductionDto:
        """Store an operator-entered value on a UI element of a work"""
        repository = ProductionRepository(db)
        work = ProductionService._load_work(repository, work_id, current_user)
        if work.is_completed:
            raise ValidationError("Work is already completed.")

        element = work.find_ui_element(element_id)
        if element is None:
            raise ResourceNotFoundError("UI element")

        try:
            element.record_value(value)
        except ValueError as exc:
            raise ValidationError(str(exc), details={"element": element.id})

        if work.details.status == WorkStatus.NOT_STARTED:
            work.details.status = WorkStatus.IN_PROGRESS
        return ProductionService._save(db, repository, work)

    @staticmethod
    def complete_work(db: Session, work_id: str, current_user: User) -> ProductionDto:
        repository = ProductionRepository(db)
        work = ProductionService._load_work(repository, work_id, current_user)
        if work.is_completed:
            return production_to_dto(work)

        ProductionFactory.complete(work)
        repository.save(work)
        db.commit()
        logger.info(f"Work {work.id} completed by {current_user.email}")
        return production_to_dto(work)

    @staticmethod
    def validate(db: Session, production_id: str) -> ValidationResultDto:
        production = ProductionService._load(ProductionRepository(db), production_id)
        result = ProductionFactory.validate(production)
        return ValidationResultDto(is_valid=result.is_valid, messages=result.messages)

    @staticmethod
    def get_production(db: Session, production_id: str) -> ProductionDto:
        return production_to_dto(ProductionService._load(ProductionRepository(db), production_id))

    @staticmethod
    def list_productions(
        db: Session,
        kind: Optional[ProductionKind] = None,
        assigned_to: Optional[str] = None,
    ) -> List[ProductionDto]:
        productions = ProductionRepository(db).list(kind=kind, assigned_to=assigned_to)
        return [production_to_dto(p) for p in productions]


production_service = ProductionService()
