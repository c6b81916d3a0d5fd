"""
Request/response schemas for the account and to-do endpoints.

Wire names are camelCase (``oldPassword``, ``listId``); snake_case is
accepted on input as well.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------------- account ----------------------------------
class RegisterDto(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=100)
    role: Optional[str] = None


class LoginDto(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ConfirmEmailDto(ApiModel):
    email: EmailStr
    code: str = Field(min_length=1)


class ForgotPasswordDto(ApiModel):
    email: EmailStr


class ResetPasswordDto(ApiModel):
    email: EmailStr
    code: str = Field(min_length=1)
    password: str = Field(min_length=1, max_length=100)


class UserInfoDto(ApiModel):
    role: Optional[str] = None
    email: EmailStr


class ChangePasswordDto(ApiModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=100)


class AuthResponse(ApiModel):
    token: str
    user_info: UserInfoDto


# ---------------------------------- to-do ----------------------------------
class CreateListDto(ApiModel):
    title: str = Field(min_length=1, max_length=255)


class ShareListDto(ApiModel):
    list_id: str = Field(min_length=1)
    email: EmailStr


class TodoListOut(ApiModel):
    id: str
    owner_id: str
    title: str
    created_at: Optional[datetime] = None


class CreateItemDto(ApiModel):
    list_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    notes: Optional[str] = None
    completed: bool = False
    position: Optional[int] = Field(default=None, ge=0)


class UpdateItemDto(ApiModel):
    id: str = Field(min_length=1)
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    notes: Optional[str] = None
    completed: Optional[bool] = None
    position: Optional[int] = Field(default=None, ge=0)


class UpdateAllItemsDto(ApiModel):
    items: List[UpdateItemDto] = Field(min_length=1)


class TodoItemOut(ApiModel):
    id: str
    list_id: str
    title: str
    notes: Optional[str] = None
    completed: bool
    position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
