from typing import Annotated

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from .errors import ValidationError

# Largest values an integer and a big-integer column hold on every supported backend.
MAX_INT = 2147483647
MAX_ID = 9223372036854775807

Amount = Annotated[int, Field(ge=0, le=MAX_INT)]
RecordId = Annotated[int, Field(ge=1, le=MAX_ID)]


class Insert(BaseModel):
    """Immutable, validated-on-construction payload for a single entity."""

    model_config = ConfigDict(frozen=True, extra='ignore')


def parse(schema, data):
    """Build ``schema`` from ``data`` or raise ``ValidationError`` with a field map."""
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        errors = {}
        for err in e.errors():
            field = '.'.join(str(part) for part in err['loc']) or '__all__'
            errors.setdefault(field, err['msg'])
        raise ValidationError('Invalid input', errors=errors)


def merge(instance, schema, changes):
    """Validate a partial update by re-parsing the full record with ``changes`` applied."""
    current = {name: getattr(instance, name) for name in schema.model_fields}
    current.update({key: value for key, value in changes.items() if key in schema.model_fields})
    return parse(schema, current)


def apply_changes(instance, validated, changes):
    """Copy the changed fields of ``validated`` onto ``instance``; return their names."""
    fields = [name for name in type(validated).model_fields if name in changes]
    for name in fields:
        setattr(instance, name, getattr(validated, name))
    return fields
