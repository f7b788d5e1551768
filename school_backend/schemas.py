"""Request and response schemas for the users collection.

Wire names (``class``, ``fatherName``, ``passportImage`` ...) match the
fields the existing frontend sends, so Python attributes carry aliases.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal['admin', 'student']

PASSWORD_MIN_LENGTH = 6
# Four UTF-8 bytes per character stays under passlib's 4096-byte limit.
PASSWORD_MAX_LENGTH = 1024
PHONE_MIN_LENGTH = 10


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AdminRegistrationRequest(_AliasedModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = None
    number: str | None = Field(default=None, min_length=PHONE_MIN_LENGTH)
    address: str | None = None
    gender: str | None = None


class StudentRegistrationRequest(_AliasedModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    role: Role
    name: str | None = None
    number: str | None = Field(default=None, min_length=PHONE_MIN_LENGTH)
    class_name: str | None = Field(default=None, alias='class')
    address: str | None = None
    father_name: str | None = Field(default=None, alias='fatherName')
    mother_name: str | None = Field(default=None, alias='motherName')
    age: int | None = None
    birthdate: str | None = None
    gender: str | None = None


class CreateStudentRequest(_AliasedModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = None
    number: str | None = Field(default=None, min_length=PHONE_MIN_LENGTH)
    class_name: str | None = Field(default=None, alias='class')
    address: str | None = None


class UpdateStudentRequest(_AliasedModel):
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = None
    number: str | None = Field(default=None, min_length=PHONE_MIN_LENGTH)
    class_name: str | None = Field(default=None, alias='class')
    address: str | None = None


class CreateAdminRequest(_AliasedModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str | None = None
    number: str | None = Field(default=None, min_length=PHONE_MIN_LENGTH)
    address: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str
    role: Role


class MessageResponse(BaseModel):
    message: str


class SendTestEmailRequest(BaseModel):
    email: EmailStr
    name: str = ''


class AccountResponse(BaseModel):
    """Public view of a stored account. The password hash is never serialized."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: str
    name: str | None = None
    number: str | None = None
    class_name: str | None = Field(default=None, serialization_alias='class')
    address: str | None = None
    father_name: str | None = Field(default=None, serialization_alias='fatherName')
    mother_name: str | None = Field(default=None, serialization_alias='motherName')
    age: int | None = None
    birthdate: str | None = None
    gender: str | None = None
    passport_image: str | None = Field(default=None, serialization_alias='passportImage')
