from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from auth_api.schemas.auth import AuthResponse


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    auth_id: str
    name: Optional[str] = None
    phone_number: Optional[str] = None
    avatar: Optional[str] = None


class UserWithAuthResponse(UserResponse):
    auth: AuthResponse


class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone_number: Optional[str] = None
    avatar: Optional[str] = None


class UserListResponse(BaseModel):
    users: List[UserWithAuthResponse]
    total: int
    page: int
    limit: int
