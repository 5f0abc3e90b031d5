"""Creation and derivation of productions along Template -> Preparation -> Work"""

from typing import Optional
import logging

from jacore.core.exceptions import ResourceNotFoundError, ValidationError
from jacore.core.timeutils import utcnow
from jacore.domain.elements import ValidationResult, clone_steps
from jacore.domain.productions import (
    NAME_MAX_LENGTH,
    TEMPLATE_NAME_MAX_LENGTH,
    PreparationDetails,
    Production,
    ProductionKind,
    TemplateDetails,
    WorkDetails,
    WorkStatus,
)
from jacore.repositories.productions import ProductionRepository

logger = logging.getLogger(__name__)

PREPARATION_MARKER = "- Preparation"
WORK_MARKER = "- Work"


class ProductionFactory:
    """Builds new production records; never persists them.

    Every derived production receives deep copies of its source's steps and
    parameters, so mutating one stage never reaches another.
    """

    def __init__(self, repository: ProductionRepository):
        self.repository = repository

    def create_template(
        self,
        name: str,
        created_by: Optional[str],
        description: Optional[str] = None,
    ) -> Production:
        if not name or not name.strip():
            raise ValidationError("Template name is required.")
        if len(name.strip()) > TEMPLATE_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Template name must be at most {TEMPLATE_NAME_MAX_LENGTH} characters."
            )
        return Production(
            name=name.strip(),
            details=TemplateDetails(),
            description=description,
            created_by=created_by,
        )

    def derive_from_template(self, template_id: str) -> Production:
        """
        Derive a preparation from a template

        Raises:
            ResourceNotFoundError: If no template has this id
            ValidationError: If the derived name would not fit
        """
        template = self.repository.get_template(template_id)
        if template is None:
            raise ResourceNotFoundError("Template")

        name = f"{template.name} {PREPARATION_MARKER}"
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(f"Preparation name must be at most {NAME_MAX_LENGTH} characters.")

        preparation = Production(
            name=name,
            details=PreparationDetails(),
            description=template.description,
            created_by=template.created_by,
            template_id=template.id,
            steps=clone_steps(template.steps),
        )
        logger.info(f"Derived preparation {preparation.id} from template {template.id}")
        return preparation

    def derive_from_preparation(self, preparation_id: str, assigned_to: str) -> Production:
        """
        Derive a work record from a preparation

        Raises:
            ResourceNotFoundError: If no preparation has this id
            ValidationError: If the preparation has no name or no assignee is given
        """
        preparation = self.repository.get_preparation(preparation_id)
        if preparation is None:
            raise ResourceNotFoundError("Preparation")
        if not preparation.name or not preparation.name.strip():
            raise ValidationError("Preparation name cannot be empty.")
        if not assigned_to or not assigned_to.strip():
            raise ValidationError("Work must be assigned to someone.")

        work = Production(
            name=preparation.name.replace(PREPARATION_MARKER, WORK_MARKER),
            details=WorkDetails(
                assigned_to=assigned_to.strip().lower(),
                start_date=utcnow(),
                status=WorkStatus.IN_PROGRESS,
                parameters=[parameter.copy() for parameter in preparation.parameters],
            ),
            description=preparation.description,
            created_by=preparation.created_by,
            template_id=preparation.template_id,
            steps=clone_steps(preparation.steps),
        )
        logger.info(f"Derived work {work.id} from preparation {preparation.id} for {work.details.assigned_to}")
        return work

    @staticmethod
    def complete(work: Production) -> Production:
        """Mark a work completed; a second call keeps the first completion date"""
        if work.kind != ProductionKind.WORK:
            raise ValidationError("Only work productions can be completed.")

        details = work.details
        if details.status == WorkStatus.COMPLETED:
            return work

        details.status = WorkStatus.COMPLETED
        details.completion_date = utcnow()
        work.is_completed = True
        work.touch()
        return work

    @staticmethod
    def validate(production: Production) -> ValidationResult:
        return production.validate()
