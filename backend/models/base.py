"""
Shared pydantic base for request bodies.

Wire keys are camelCase (leadType, followUpDate), Python attributes
snake_case. Unknown keys are rejected.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_doc(self, **kwargs) -> dict:
        """camelCase dict for MongoDB, only the keys the caller sent"""
        return self.model_dump(by_alias=True, exclude_unset=True, **kwargs)


def blank_to_empty(v):
    """None -> "", numbers -> str (spreadsheet imports send phones as ints)"""
    if v is None:
        return ""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(int(v)) if float(v).is_integer() else str(v)
    return v


def blank_to_none(v):
    """"" -> None for optional dates"""
    if isinstance(v, str) and not v.strip():
        return None
    return v
