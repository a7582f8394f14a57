# sitewright/services/patch.py
"""
Anchored edit operators.

Each operator works on the first literal occurrence of ``old_code`` in
``contents``. When the anchor occurs more than once only the first match
is touched. A missing anchor raises ``AnchorNotFoundError``; edits are
never silently dropped.
"""
from __future__ import annotations

from typing import Optional

from sitewright.core.errors import AnchorNotFoundError, EditValidationError
from sitewright.models.chat import EditOperation


def _find_anchor(contents: str, old_code: str) -> int:
    if not old_code:
        raise EditValidationError("oldCode must be a non-empty string")
    idx = contents.find(old_code)
    if idx < 0:
        raise AnchorNotFoundError(old_code)
    return idx


def _require_new_code(new_code: Optional[str], kind: str) -> str:
    if new_code is None:
        raise EditValidationError(f"newCode is required for {kind}")
    return new_code


def apply_removal(contents: str, old_code: str, new_code: Optional[str] = None) -> str:
    idx = _find_anchor(contents, old_code)
    return contents[:idx] + contents[idx + len(old_code):]


def apply_modification(contents: str, old_code: str, new_code: Optional[str] = None) -> str:
    replacement = _require_new_code(new_code, "modification")
    idx = _find_anchor(contents, old_code)
    return contents[:idx] + replacement + contents[idx + len(old_code):]


def apply_addition(contents: str, old_code: str, new_code: Optional[str] = None) -> str:
    addition = _require_new_code(new_code, "addition")
    end = _find_anchor(contents, old_code) + len(old_code)
    return contents[:end] + "\n" + addition + contents[end:]


OPERATORS = {
    "removal": apply_removal,
    "modification": apply_modification,
    "addition": apply_addition,
}


def apply_edit(contents: str, op: EditOperation) -> str:
    return OPERATORS[op.type](contents, op.old_code, op.new_code)
