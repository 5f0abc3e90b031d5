"""Shared schema helpers"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire DTOs: camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# Checked by email-validator; stored and compared lower-cased
Email = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]
