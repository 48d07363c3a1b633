from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserOut(CamelModel):
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    email: str
