"""
Base Pydantic model for all API param schemas.

Key features:
- frozen=True: Immutable after normalization (prevents downstream mutation)
- populate_by_name=True: Accept both alias (startDate) and field name (start_date)
- extra='ignore': Ignore undeclared fields (safe)
- empty strings become None before field validation
"""

from pydantic import BaseModel, ConfigDict, field_validator


class BaseParamsModel(BaseModel):
    """
    Base model for all API param schemas.

    Query strings arrive as flat str dicts (request.args.to_dict()); a
    blank value means "not provided".
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        extra='ignore',
    )

    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and v.strip() == '':
            return None
        return v
