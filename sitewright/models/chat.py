# sitewright/models/chat.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal["user", "assistant"]
EditType = Literal["addition", "modification", "removal"]
Complexity = Literal["base", "complex"]


class Message(BaseModel):
    role: Role
    content: str
    files: Optional[Dict[str, Any]] = None


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    messages: List[Dict[str, Any]]
    mode: Literal["agent", "plan"] = "agent"


class CreateProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    prompt: str = Field(min_length=1)


# ----- tool arguments -----

class EditOperation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: EditType
    filepath: str = Field(min_length=1)
    old_code: str = Field(alias="oldCode", min_length=1)
    new_code: Optional[str] = Field(default=None, alias="newCode")

    @model_validator(mode="after")
    def _new_code_required(self) -> "EditOperation":
        if self.type in ("addition", "modification") and self.new_code is None:
            raise ValueError(f"newCode is required for {self.type}")
        return self


class ListFilesArgs(BaseModel):
    path: Optional[str] = None


class ReadFilesArgs(BaseModel):
    paths: List[str] = Field(min_length=1)


class UpdateFilesArgs(BaseModel):
    updates: List[EditOperation] = Field(min_length=1)


class ResponseTextArgs(BaseModel):
    text: str = Field(min_length=1)


# ----- tool results -----

class UpdateFilesResult(BaseModel):
    results: Dict[str, str] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)


class AppliedEdit(BaseModel):
    type: EditType
    filepath: str
    old_code: str
    new_code: Optional[str] = None


class ToolCall(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


# ----- update plan variant -----

class PlannedUpdate(BaseModel):
    type: EditType
    code: Optional[str] = None
    context: str

    @model_validator(mode="after")
    def _code_required(self) -> "PlannedUpdate":
        if self.type != "removal" and not self.code:
            raise ValueError(f"code is required for {self.type}")
        return self


class UpdatePlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath", min_length=1)
    updates: List[PlannedUpdate] = Field(default_factory=list)


class PlanApplyResult(BaseModel):
    success: bool
    message: str
    file_path: str


class InitialProject(BaseModel):
    file: str
    overview: str
