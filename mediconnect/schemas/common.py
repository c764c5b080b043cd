from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python, readable from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class APIResponse(CamelModel, Generic[DataT]):
    success: bool = True
    data: DataT
    count: Optional[int] = None
    message: Optional[str] = None


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class DoctorSummary(UserSummary):
    specialization: Optional[str] = None
