"""Pydantic schemas for Web API.

Serialization models for auth, modules, progress and health.
Request fields default to empty values so the handlers can return the
same validation messages the front-end expects.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for registering a user."""

    username: str = Field(default="", max_length=50)
    email: str = Field(default="", max_length=200)
    password: str = Field(default="", max_length=200)


class LoginRequest(BaseModel):
    """Request body for logging in."""

    username: str = Field(default="", max_length=50)
    password: str = Field(default="", max_length=200)


class UserResponse(BaseModel):
    """Public user fields."""

    id: int
    username: str
    email: str | None = None


class AuthResponse(BaseModel):
    """Response for register and login."""

    message: str
    user: UserResponse


class CurrentUserResponse(BaseModel):
    """Response for the current user lookup."""

    user: UserResponse


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# =============================================================================
# MODULE SCHEMAS
# =============================================================================


class ModuleSummary(BaseModel):
    """Module metadata without content."""

    id: int
    title: str
    description: str
    difficulty: str
    estimated_time: str
    order_index: int

    model_config = ConfigDict(from_attributes=True)


class ConceptSchema(BaseModel):
    title: str
    explanation: str
    example: str = ""
    analogy: str = ""

    model_config = ConfigDict(from_attributes=True)


class ExerciseSchema(BaseModel):
    title: str
    description: str
    starter_code: str = ""
    solution: str = ""
    hints: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class QuizQuestionSchema(BaseModel):
    question: str
    options: list[str]
    correct: int
    explanation: str = ""

    model_config = ConfigDict(from_attributes=True)


class ModuleContentSchema(BaseModel):
    story: str = ""
    concepts: list[ConceptSchema] = Field(default_factory=list)
    exercises: list[ExerciseSchema] = Field(default_factory=list)
    quiz: list[QuizQuestionSchema] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ModuleDetail(ModuleSummary):
    """Module with its full content payload."""

    content: ModuleContentSchema


class ModuleListResponse(BaseModel):
    """Response for list of modules."""

    modules: list[ModuleSummary]
    count: int


class ModuleDetailResponse(BaseModel):
    """Response for one module."""

    module: ModuleDetail


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class ProgressSaveRequest(BaseModel):
    """Request body for saving progress. Accepts camelCase keys."""

    module_id: int = Field(..., alias="moduleId")
    completed: bool = False
    score: float | None = Field(default=None, allow_inf_nan=False)
    time_spent: float | None = Field(default=None, alias="timeSpent", allow_inf_nan=False)

    model_config = ConfigDict(populate_by_name=True)


class ProgressEntry(BaseModel):
    """One progress row joined with the module title."""

    module_id: int
    title: str
    completed: bool
    score: int | float | None = None
    time_spent: int | float | None = None
    last_accessed: str


class ProgressListResponse(BaseModel):
    """Response for the caller's progress rows."""

    progress: list[ProgressEntry]
    count: int


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    message: str = "Student Training Platform is running"
    environment: str = "development"
    public_url: str = ""
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    error: str
