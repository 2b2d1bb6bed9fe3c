from pydantic import BaseModel, EmailStr
from typing import Literal, Optional
from datetime import datetime

Role = Literal["owner", "admin", "editor", "viewer"]


class MemberInvite(BaseModel):
    email: EmailStr
    role: Role = "viewer"


class MemberRoleUpdate(BaseModel):
    role: Role


class MemberResponse(BaseModel):
    id: str
    project_id: str
    profile_id: str
    role: str
    joined_at: datetime

    class Config:
        from_attributes = True


class MemberWithProfileResponse(MemberResponse):
    username: str
    email: str
    avatar_url: Optional[str] = None
