"""
Pydantic schemas for the portfolio backend.

Input models validate raw request data inside the service layer; response
models describe the JSON the routes return.
"""

from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from portfolio_api.db import ContactStatus, ProjectStatus
from portfolio_api.errors import ValidationError, field_errors

TRUTHY = ("true", "1", "yes", "on")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def validate_input(model: type[BaseModel], data: Any) -> Any:
    """Validate raw input, raising the service-level ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(errors=field_errors(exc.errors())) from exc


def as_bool(value: Any, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def parse_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of ``value`` (``"2.5"`` -> 2); ``default`` if none."""
    if value is None or isinstance(value, bool):
        return default
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else default


def split_technologies(value: Any) -> list[str]:
    """Split a comma-separated string (or list) into unique, trimmed names."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    seen: list[str] = []
    for item in items:
        name = str(item).strip()
        if name and name not in seen:
            seen.append(name)
    return seen


# ---------------------------------------------------------------------------
# Inputs


class PersonalInfoUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=1)
    email: EmailStr
    role: Optional[str] = None
    tagline: Optional[str] = None
    phone: Optional[str] = None
    github: Optional[str] = None
    linkedin: Optional[str] = None
    profileImage: Optional[str] = None


class AboutUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    aboutMe: str = Field(..., min_length=1)


class ProjectForm(BaseModel):
    """Scalar project fields as submitted with a create or update form."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=500)
    longDescription: str = ""
    technologies: list[str] = Field(default_factory=list)
    liveUrl: str = ""
    githubUrl: str = ""
    demoUrl: str = ""
    featured: bool = False
    status: ProjectStatus = ProjectStatus.COMPLETED
    order: int = 0

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_optionals(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if value is not None
                and not (key in ("status", "order") and value == "")
            }
        return data

    @field_validator("technologies", mode="before")
    @classmethod
    def _split_technologies(cls, value: Any) -> list[str]:
        return split_technologies(value)

    @field_validator("featured", mode="before")
    @classmethod
    def _parse_featured(cls, value: Any) -> bool:
        return as_bool(value)

    @field_validator("order", mode="before")
    @classmethod
    def _parse_order(cls, value: Any) -> int:
        return parse_int(value)


class ContactSubmission(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=1000)


class StatusUpdate(BaseModel):
    status: str


class LoginRequest(BaseModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Responses


class PersonalInfoModel(BaseModel):
    name: str
    role: str
    tagline: str
    phone: str
    email: str
    github: str
    linkedin: str
    profileImage: str


class SkillModel(BaseModel):
    name: str
    level: int = Field(..., ge=1, le=100)


class CvFileModel(BaseModel):
    filename: str
    storagePath: str
    uploadDate: Optional[str] = None


class PortfolioModel(BaseModel):
    personalInfo: PersonalInfoModel
    aboutMe: str
    skills: list[SkillModel]
    cvFile: Optional[CvFileModel] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProjectImageModel(BaseModel):
    filename: str
    storagePath: str
    altText: str


class ProjectModel(BaseModel):
    id: str
    title: str
    description: str
    longDescription: str
    technologies: list[str]
    images: list[ProjectImageModel]
    liveUrl: str
    githubUrl: str
    demoUrl: str
    featured: bool
    status: ProjectStatus
    order: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class PortfolioResponse(BaseModel):
    portfolio: PortfolioModel
    projects: list[ProjectModel]


class CvUploadResponse(BaseModel):
    message: str
    cvFile: CvFileModel


class CvCheckResponse(BaseModel):
    exists: bool
    filePath: Optional[str] = None
    filename: Optional[str] = None
    uploadDate: Optional[str] = None
    message: str


class ContactModel(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    ipAddress: Optional[str] = None
    status: ContactStatus
    createdAt: Optional[str] = None


class Pagination(BaseModel):
    current: int
    pages: int
    total: int


class ContactListResponse(BaseModel):
    contacts: list[ContactModel]
    pagination: Pagination


class ContactSubmitResponse(BaseModel):
    message: str
    success: bool


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AdminResponse(BaseModel):
    email: str
    role: str


class HealthResponse(BaseModel):
    status: Literal["ok"]
