"""Request and response schemas for the HTTP API.

Project responses use the wire names the web client reads (linkVideo,
linkRoteiro, ...); Python code uses the snake_case field names.
"""

import re
import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Credentials(BaseModel):
    """Request schema for register and login."""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not _EMAIL_RE.match(v):
            raise ValueError("invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("password must not be empty")
        return v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str


class UserResponse(BaseModel):
    user: UserOut


class MessageResponse(BaseModel):
    message: str


class ProcessRequest(BaseModel):
    """Request schema for POST /api/processar."""
    prompt: str
    type: str

    @field_validator("prompt", "type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProcessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: uuid.UUID = Field(alias="projectId")
    status: str
    message: str


class ProjectOut(BaseModel):
    # Built with from_project(): ORM classes expose a "metadata" attribute
    # of their own, so attribute-based validation would read the wrong one.
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    user_id: uuid.UUID = Field(alias="userId")
    type: str
    prompt: str
    status: str
    video_url: Optional[str] = Field(None, alias="linkVideo")
    script_text: Optional[str] = Field(None, alias="linkRoteiro")
    audio_url: Optional[str] = Field(None, alias="linkAudio")
    metadata_json: Optional[dict[str, Any]] = Field(None, alias="metadata")
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_project(cls, project) -> "ProjectOut":
        return cls(
            id=project.id,
            user_id=project.user_id,
            type=project.type,
            prompt=project.prompt,
            status=project.status,
            video_url=project.video_url,
            script_text=project.script_text,
            audio_url=project.audio_url,
            metadata_json=project.metadata_json,
            created_at=project.created_at,
        )
