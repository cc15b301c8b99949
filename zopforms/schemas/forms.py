import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FieldType = Literal[
    "text",
    "email",
    "phone",
    "textarea",
    "select",
    "radio",
    "checkbox",
    "date",
    "rating",
]


# ---------------------------------------------------------------------------
# Field schemas
# ---------------------------------------------------------------------------


class FieldValidation(BaseModel):
    """Client-side validation hints. Stored and served, not enforced."""

    min: float | None = None
    max: float | None = None
    pattern: str | None = None


class FormField(BaseModel):
    """Single input within a form."""

    id: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    label: str = Field(..., min_length=1, max_length=1000)
    placeholder: str | None = None
    required: bool = False
    options: list[str] | None = Field(
        None,
        description="Choices for select, radio and checkbox fields",
    )
    correct_answer: str | list[str] | None = Field(
        None,
        description="Quiz mode only; a list for checkbox questions",
    )
    points: int = Field(1, ge=0)
    validation: FieldValidation | None = None


# ---------------------------------------------------------------------------
# Settings schemas
# ---------------------------------------------------------------------------


class FormSettings(BaseModel):
    allow_multiple_submissions: bool = False
    show_progress_bar: bool = True
    collect_email: bool = False
    is_quiz: bool = False
    show_results: bool = True
    is_public: bool = True
    require_auth: bool = False


class FormSettingsUpdate(BaseModel):
    allow_multiple_submissions: bool | None = None
    show_progress_bar: bool | None = None
    collect_email: bool | None = None
    is_quiz: bool | None = None
    show_results: bool | None = None
    is_public: bool | None = None
    require_auth: bool | None = None


# ---------------------------------------------------------------------------
# Form CRUD schemas
# ---------------------------------------------------------------------------


class FormCreate(BaseModel):
    title: str = Field("Untitled Form", min_length=1, max_length=255)
    description: str = ""
    fields: list[FormField] = Field(default_factory=list)
    settings: FormSettings = Field(default_factory=FormSettings)


class FormUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    fields: list[FormField] | None = None
    settings: FormSettingsUpdate | None = None
    is_active: bool | None = None


class FormDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str
    fields: list[FormField]
    settings: FormSettings
    is_active: bool
    response_count: int
    created_at: datetime
    updated_at: datetime


class FormListResponse(BaseModel):
    items: list[FormDetail]
    total: int
    page: int
    page_size: int


# ---------------------------------------------------------------------------
# Submission schemas
# ---------------------------------------------------------------------------


class FormSubmission(BaseModel):
    """Answers submitted to a form."""

    answers: dict[str, Any] = Field(
        default_factory=dict,
        description="Map of field id to answer value",
    )
    submitter_email: str | None = Field(None, max_length=255)
    submitter_name: str | None = Field(None, max_length=255)


class SubmissionResult(BaseModel):
    id: uuid.UUID
    form_id: uuid.UUID
    submitted_at: datetime
    score: int | None = None
    max_score: int | None = None
    message: str = "Response recorded"


class FormResponseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    answers: dict[str, Any]
    submitter_email: str | None
    submitter_name: str | None
    score: int | None
    ip_address: str | None
    submitted_at: datetime


class FormResponseListResponse(BaseModel):
    items: list[FormResponseSchema]
    total: int
    page: int
    page_size: int
