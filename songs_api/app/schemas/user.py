"""
Pydantic models for user data.

``UserRead`` has no password field, so stored hashes never reach a
response body.  ``isActive`` is the wire name of ``is_active``.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: Optional[str] = Field(None, examples=["Ana"])
    lastname: Optional[str] = Field(None, examples=["García"])
    email: Optional[str] = Field(None, examples=["ana@example.com"])
    password: Optional[str] = Field(None, examples=["strongpassword"])
    age: Optional[int] = Field(None, examples=[25])


class UserLogin(BaseModel):
    email: Optional[str] = Field(None, examples=["ana@example.com"])
    password: Optional[str] = Field(None, examples=["strongpassword"])


class UserUpdate(UserCreate):
    """Schema for updating a user.

    ``id`` names the user.  Only fields present in the body are applied.
    ``role`` may only be changed by an administrator.
    """

    id: Optional[str] = Field(None, examples=["507f1f77bcf86cd799439011"])
    role: Optional[Role] = None


class UserStatusUpdate(BaseModel):
    """Body of the status endpoint; omit ``isActive`` to toggle."""

    model_config = ConfigDict(populate_by_name=True)

    is_active: Optional[bool] = Field(None, alias="isActive")


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    lastname: Optional[str] = None
    email: str
    age: Optional[int] = None
    role: Role = "user"
    is_active: bool = Field(True, alias="isActive")


class UserListResponse(BaseModel):
    message: str
    payload: List[UserRead]


class UserResponse(BaseModel):
    message: str
    payload: UserRead


class UserMutationPayload(BaseModel):
    message: str
    user: UserRead


class UserMutationResponse(BaseModel):
    ok: bool = True
    payload: UserMutationPayload


class LoginUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: Role


class LoginResponse(BaseModel):
    ok: bool = True
    message: str
    token: str
    user: LoginUser


class UserIndicators(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(alias="totalUsers")
    active_users: int = Field(alias="activeUsers")
    inactive_users: int = Field(alias="inactiveUsers")
    users_by_role: dict = Field(alias="usersByRole")
    average_age: Optional[float] = Field(None, alias="averageAge")


class UserIndicatorsResponse(BaseModel):
    ok: bool = True
    payload: UserIndicators
