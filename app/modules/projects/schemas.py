from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    owner_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ProjectWithStatsResponse(ProjectResponse):
    total_tasks: int = 0
    completed_tasks: int = 0
    member_count: int = 0
    user_role: str
    is_owner: bool


class ProjectRoleResponse(BaseModel):
    project_id: str
    role: str
    permissions: List[str]
