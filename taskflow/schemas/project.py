from typing import Annotated, Optional
from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=256)]
    description: Optional[str] = None


class MemberAdd(BaseModel):
    user_id: Annotated[str, Field(min_length=1, max_length=128)]


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    owner_id: str
    members: list[str]
    created_at: str
