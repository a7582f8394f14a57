# sitewright/services/validation.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError

from sitewright.core.errors import ModelTransportError
from sitewright.models.chat import InitialProject, UpdatePlan


def validate_relative_path(p: Any) -> str:
    if not isinstance(p, str) or not p:
        raise ValueError("path must be a non-empty string")

    if p.startswith("/") or p.startswith("\\") or "://" in p:
        raise ValueError(f"path must be relative: {p}")

    if ".." in p.replace("\\", "/").split("/"):
        raise ValueError(f"path must not contain '..': {p}")

    return p


def validate_update_plan(obj: Dict[str, Any]) -> UpdatePlan:
    if not isinstance(obj, dict):
        raise ModelTransportError("Update plan must be a JSON object")
    try:
        plan = UpdatePlan.model_validate(obj)
    except ValidationError as ex:
        raise ModelTransportError(f"Malformed update plan: {ex.error_count()} error(s): {ex}") from ex
    try:
        validate_relative_path(plan.file_path)
    except ValueError as ex:
        raise ModelTransportError(f"Malformed update plan: {ex}") from ex
    return plan


def validate_initial_project(obj: Dict[str, Any]) -> InitialProject:
    if not isinstance(obj, dict):
        raise ModelTransportError("Initial project response must be a JSON object")
    for k in ("file", "overview"):
        if k not in obj:
            raise ModelTransportError(f"Missing field: {k}")
    try:
        return InitialProject.model_validate(obj)
    except ValidationError as ex:
        raise ModelTransportError(f"Malformed initial project: {ex}") from ex
