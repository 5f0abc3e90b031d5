"""Production persistence model"""

import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, CheckConstraint

from jacore.core.database import Base


class ProductionRecord(Base):
    """Row for every production kind.

    Steps and parameters are stored as JSON documents; work-only columns are
    NULL for templates and preparations.
    """

    __tablename__ = "productions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    kind = Column(String(20), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)
    template_id = Column(String(36), nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    modified_at = Column(DateTime(timezone=True), nullable=False)
    steps_json = Column(Text, nullable=False, default="[]")
    parameters_json = Column(Text, nullable=True)

    # Work only
    assigned_to = Column(String(255), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    completion_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=True)

    __table_args__ = (
        Index('idx_productions_kind', 'kind'),
        Index('idx_productions_template', 'template_id'),
        CheckConstraint(
            "kind IN ('template', 'preparation', 'work')",
            name='chk_production_kind'
        ),
        CheckConstraint(
            "status IS NULL OR status IN ('NotStarted', 'InProgress', 'OnHold', 'Completed', 'Cancelled')",
            name='chk_production_status'
        ),
    )

    def __repr__(self):
        return f"<ProductionRecord(id={self.id}, kind='{self.kind}', name='{self.name}')>"
