from datetime import datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jacore.core.database import Base
from jacore.domain.elements import (
    CheckBoxElement,
    DeviceElement,
    DeviceOperation,
    Operation,
    Step,
    TextBoxElement,
)
from jacore.domain.productions import (
    ParameterType,
    Production,
    ProductionParameter,
    WorkDetails,
    WorkStatus,
)
from jacore.mappers.productions import production_to_dto
from jacore.repositories.productions import ProductionRepository


def _make_session():
    engine = create_engine("sqlite:///:memory:")
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return SessionLocal()


def test_work_with_devices_survives_storage():
    db = _make_session()
    try:
        device = DeviceElement(name="Balance", serial_number="B-100", category="Weighing")
        device.device_operations = [
            DeviceOperation(
                name="Tare",
                is_custom_operation=True,
                device_id=device.id,
                ui_elements=[TextBoxElement(name="reading", validation_pattern=r"^\d+$", value="120")],
            )
        ]
        work = Production(
            name="Assay - Work",
            details=WorkDetails(
                assigned_to="alice@example.com",
                start_date=datetime(2026, 3, 1, 8, 30),
                status=WorkStatus.ON_HOLD,
                parameters=[
                    ProductionParameter(name="Start", parameter_type=ParameterType.DATETIME, value=datetime(2026, 3, 1, 9, 0)),
                    ProductionParameter(name="Sterile", parameter_type=ParameterType.BOOLEAN, value=True),
                ],
            ),
            steps=[
                Step(
                    name="Check",
                    operations=[Operation(name="Safety", ui_elements=[CheckBoxElement(name="gloves", is_checked=True)]), device],
                )
            ],
        )
        repository = ProductionRepository(db)
        repository.save(work)
        db.commit()
        db.expunge_all()

        loaded = repository.get_work(work.id)
        assert loaded.details.status == WorkStatus.ON_HOLD
        assert loaded.details.start_date == datetime(2026, 3, 1, 8, 30)
        assert loaded.parameters[0].value == datetime(2026, 3, 1, 9, 0)
        assert loaded.parameters[1].value is True

        safety, balance = loaded.steps[0].operations
        assert isinstance(safety.ui_elements[0], CheckBoxElement)
        assert safety.ui_elements[0].is_checked is True
        assert isinstance(balance, DeviceElement)
        assert balance.serial_number == "B-100"
        assert balance.device_operations[0].device_id == balance.id
        reading = balance.device_operations[0].ui_elements[0]
        assert isinstance(reading, TextBoxElement)
        assert reading.value == "120"
        assert reading.id == device.device_operations[0].ui_elements[0].id

        assert repository.get_template(work.id) is None
        assert repository.get_preparation(work.id) is None
    finally:
        db.close()


def test_dto_uses_camel_case_and_nulls_work_fields_for_templates():
    from jacore.domain.productions import TemplateDetails

    dto = production_to_dto(Production(name="Assay", details=TemplateDetails()))
    wire = dto.model_dump(by_alias=True, mode="json")
    assert wire["kind"] == "template"
    assert wire["isCompleted"] is False
    assert wire["assignedTo"] is None
    assert wire["status"] is None
    assert wire["parameters"] == []
