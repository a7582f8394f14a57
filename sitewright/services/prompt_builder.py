# sitewright/services/prompt_builder.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from sitewright.core.prompt import (
    AGENT_SYSTEM_PROMPT,
    COMPLEXITY_SYSTEM_PROMPT,
    CONCLUDING_SYSTEM_PROMPT,
    INITIAL_PROJECT_SYSTEM_PROMPT,
    PLAN_SYSTEM_PROMPT,
    PRELIMINARY_SYSTEM_PROMPT,
    REWRITE_SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
)
from sitewright.core.schema import INITIAL_PROJECT_SCHEMA, UPDATE_PLAN_SCHEMA
from sitewright.models.chat import Message, UpdatePlan


def _compact(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def history_to_model_messages(history: Sequence[Message]) -> List[Dict[str, str]]:
    return [{"role": m.role, "content": m.content or ""} for m in history]


def _with_system(system: str, history: Sequence[Message], user_content: str) -> List[Dict[str, str]]:
    messages: List[Dict[str, str]] = [{"role": "system", "content": system}]
    messages.extend(history_to_model_messages(history))
    messages.append({"role": "user", "content": user_content})
    return messages


def build_complexity_messages(history: Sequence[Message], prompt: str) -> List[Dict[str, str]]:
    return _with_system(COMPLEXITY_SYSTEM_PROMPT, history, prompt)


def build_preliminary_messages(history: Sequence[Message], prompt: str, window: int = 10) -> List[Dict[str, str]]:
    recent = list(history)[-window:] if window > 0 else []
    return _with_system(
        PRELIMINARY_SYSTEM_PROMPT,
        recent,
        f"Provide a preliminary response for this update: {prompt}",
    )


def build_agent_messages(history: Sequence[Message], prompt: str) -> List[Dict[str, Any]]:
    return _with_system(AGENT_SYSTEM_PROMPT, history, prompt)


def build_concluding_messages(updates: Sequence[Dict[str, Any]], errors: Dict[str, str]) -> List[Dict[str, str]]:
    summary = {"updates": list(updates), "errors": errors}
    return [
        {"role": "system", "content": CONCLUDING_SYSTEM_PROMPT},
        {"role": "user", "content": f"Provide a concluding response for these file updates: {_compact(summary)}"},
    ]


def build_plan_messages(objective: str, file_path: str, contents: str) -> List[Dict[str, str]]:
    system = PLAN_SYSTEM_PROMPT.format(schema_json=_compact(UPDATE_PLAN_SCHEMA), file_path=file_path)
    return [
        {"role": "system", "content": system},
        {
            "role": "user",
            "content": (
                f"objective:\n{objective}\n\n"
                f"file: {file_path}\n"
                f"current contents:\n{contents}\n"
            ),
        },
    ]


def build_rewrite_messages(plan: UpdatePlan, contents: str) -> List[Dict[str, str]]:
    edits = [u.model_dump() for u in plan.updates]
    return [
        {"role": "system", "content": REWRITE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"file: {plan.file_path}\n\n"
                f"original contents:\n{contents}\n\n"
                f"requested edits:\n{json.dumps(edits, ensure_ascii=False, indent=2)}\n"
            ),
        },
    ]


def build_title_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": TITLE_SYSTEM_PROMPT},
        {"role": "user", "content": f"Generate a title for this project: {prompt}"},
    ]


def build_initial_project_messages(prompt: str, preliminary: str) -> List[Dict[str, str]]:
    system = INITIAL_PROJECT_SYSTEM_PROMPT.format(schema_json=_compact(INITIAL_PROJECT_SCHEMA))
    return [
        {"role": "system", "content": system},
        {
            "role": "user",
            "content": (
                f"Project prompt: {prompt}\n"
                f"Preliminary plan: {preliminary}\n\n"
                "Return a schema-compliant initial project response according to the prompt and plan."
            ),
        },
    ]
