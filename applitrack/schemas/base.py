"""
Shared pydantic base for persisted shapes.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema whose JSON form uses camelCase keys.

    Attributes are snake_case in Python; `model_dump(by_alias=True)` yields the
    stored key names (appliedDate, salaryRange, ...). Either spelling is
    accepted on input.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_storage(self) -> dict:
        """Plain JSON-ready dict in the persisted (camelCase) shape."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
