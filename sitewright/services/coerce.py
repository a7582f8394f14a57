# sitewright/services/coerce.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

from sitewright.models.chat import Message, ToolCall

# Client-side rendering metadata that must not reach the model.
_ASSISTANT_TRANSPORT_KEYS = ("toolInvocations", "parts", "annotations", "id", "createdAt")


def coerce_to_tool_calls(raw_calls: List[Dict[str, Any]]) -> List[ToolCall]:
    calls: List[ToolCall] = []
    for c in raw_calls or []:
        fn = c.get("function") or {}
        args = fn.get("arguments")
        if isinstance(args, str):
            try:
                args = json.loads(args) if args.strip() else {}
            except json.JSONDecodeError:
                args = {"_raw": args}
        if not isinstance(args, dict):
            args = {"_raw": args}
        calls.append(ToolCall(name=fn.get("name") or "", arguments=args))
    return calls


def clean_messages(raw_messages: List[Dict[str, Any]]) -> List[Message]:
    messages: List[Message] = []
    for m in raw_messages:
        role = (m.get("role") or "").strip().lower()
        if role not in ("user", "assistant"):
            continue
        data = {k: v for k, v in m.items() if k not in _ASSISTANT_TRANSPORT_KEYS} if role == "assistant" else dict(m)
        data["role"] = role
        data["content"] = data.get("content") or ""
        messages.append(Message.model_validate(data))
    return messages


def split_prompt(messages: List[Message]) -> Tuple[List[Message], str]:
    """Separate history from the latest user prompt."""
    if messages and messages[-1].role == "user":
        return messages[:-1], messages[-1].content
    return list(messages), ""
