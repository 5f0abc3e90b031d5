"""Production persistence"""

from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from jacore.domain.productions import Production, ProductionKind
from jacore.mappers.productions import production_from_record, production_to_record
from jacore.models.production import ProductionRecord

logger = logging.getLogger(__name__)


class ProductionRepository:
    """Loads and stores productions as ``ProductionRecord`` rows"""

    def __init__(self, db: Session):
        self.db = db

    def _get_kind(self, production_id: str, kind: ProductionKind) -> Optional[Production]:
        record = (
            self.db.query(ProductionRecord)
            .filter(ProductionRecord.id == production_id, ProductionRecord.kind == kind.value)
            .first()
        )
        return production_from_record(record) if record else None

    def get(self, production_id: str) -> Optional[Production]:
        record = self.db.get(ProductionRecord, production_id)
        return production_from_record(record) if record else None

    def get_template(self, production_id: str) -> Optional[Production]:
        return self._get_kind(production_id, ProductionKind.TEMPLATE)

    def get_preparation(self, production_id: str) -> Optional[Production]:
        return self._get_kind(production_id, ProductionKind.PREPARATION)

    def get_work(self, production_id: str) -> Optional[Production]:
        return self._get_kind(production_id, ProductionKind.WORK)

    def list(self, kind: Optional[ProductionKind] = None, assigned_to: Optional[str] = None) -> List[Production]:
        query = self.db.query(ProductionRecord)
        if kind:
            query = query.filter(ProductionRecord.kind == kind.value)
        if assigned_to:
            query = query.filter(func.lower(ProductionRecord.assigned_to) == assigned_to.strip().lower())
        records = query.order_by(ProductionRecord.created_at.desc()).all()
        return [production_from_record(record) for record in records]

    def save(self, production: Production) -> Production:
        """Insert or update; flushed, the caller commits"""
        record = self.db.get(ProductionRecord, production.id)
        is_new = record is None
        record = production_to_record(production, record)
        if is_new:
            self.db.add(record)
        self.db.flush()
        logger.debug(f"Saved {production.kind.value} production {production.id} (new={is_new})")
        return production
