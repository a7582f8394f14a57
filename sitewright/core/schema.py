# sitewright/core/schema.py
from __future__ import annotations

from typing import Any, Dict, List

EDIT_TYPES = ["addition", "modification", "removal"]

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {"type": "function", "function": {
        "name": "listFiles",
        "description": "List all files in the project's current version.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "Ignored; the whole project is listed."},
        }},
    }},
    {"type": "function", "function": {
        "name": "readFiles",
        "description": "Read the contents of one or more files from the project's current version.",
        "parameters": {"type": "object", "properties": {
            "paths": {"type": "array", "items": {"type": "string"},
                      "description": "Project-relative file paths, e.g. src/App.tsx"},
        }, "required": ["paths"]},
    }},
    {"type": "function", "function": {
        "name": "updateFiles",
        "description": (
            "Apply anchored edits to project files. oldCode must be copied exactly from the current file. "
            "modification replaces oldCode with newCode, addition inserts newCode on a new line after oldCode, "
            "removal deletes oldCode. Edits on the same file apply in order."
        ),
        "parameters": {"type": "object", "properties": {
            "updates": {"type": "array", "items": {
                "type": "object",
                "required": ["type", "filepath", "oldCode"],
                "properties": {
                    "type": {"type": "string", "enum": EDIT_TYPES},
                    "filepath": {"type": "string"},
                    "oldCode": {"type": "string"},
                    "newCode": {"type": "string"},
                },
            }},
        }, "required": ["updates"]},
    }},
    {"type": "function", "function": {
        "name": "preliminaryResponse",
        "description": "Tell the user, in markdown, what you are about to change. Use before updating files.",
        "parameters": {"type": "object", "properties": {
            "text": {"type": "string"},
        }, "required": ["text"]},
    }},
]

UPDATE_PLAN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["filePath", "updates"],
    "properties": {
        "filePath": {"type": "string"},
        "updates": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["type", "code", "context"],
                "properties": {
                    "type": {"type": "string", "enum": EDIT_TYPES},
                    "code": {"type": ["string", "null"]},
                    "context": {"type": "string"},
                },
            },
        },
    },
}

INITIAL_PROJECT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["file", "overview"],
    "properties": {
        "file": {"type": "string"},
        "overview": {"type": "string"},
    },
}
