# sitewright/services/tools.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from sitewright.core.errors import (
    AnchorNotFoundError,
    EditValidationError,
    PathResolutionError,
    ToolValidationError,
)
from sitewright.models.chat import (
    AppliedEdit,
    EditOperation,
    ListFilesArgs,
    ReadFilesArgs,
    ResponseTextArgs,
    UpdateFilesArgs,
    UpdateFilesResult,
)
from sitewright.models.file_tree import FileSystemTree, list_paths, normalize_path, read_file, write_file
from sitewright.services.patch import apply_edit
from sitewright.services.stream import StreamWriter, Usage, chunk_text
from sitewright.services.validation import validate_relative_path

logger = logging.getLogger(__name__)


def _validation_detail(ex: ValidationError) -> str:
    parts = []
    for err in ex.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _file_key(path: str) -> str:
    # "/src/App.tsx" and "src/App.tsx" name the same file for every tool
    try:
        return normalize_path(path)
    except PathResolutionError:
        return path


class _EditFailed(Exception):
    def __init__(self, index: int, total: int, cause: Exception):
        super().__init__(f"edit {index + 1} of {total} failed: {cause}")
        self.index = index
        self.cause = cause


class ProjectTools:
    """
    Capabilities exposed to the agent, bound to one run's cloned tree.

    Per-path and per-file failures come back as data; nothing raised here
    escapes ``dispatch`` except programming errors.
    """

    def __init__(self, tree: FileSystemTree, writer: StreamWriter, chunk_size: int = 20):
        self.tree = tree
        self.writer = writer
        self.chunk_size = chunk_size
        self.changes: List[AppliedEdit] = []
        self.errors: Dict[str, str] = {}
        self.emitted: List[str] = []
        self._tools: Dict[str, tuple] = {
            "listFiles": (ListFilesArgs, lambda a: self.list_files()),
            "readFiles": (ReadFilesArgs, lambda a: self.read_files(a.paths)),
            "updateFiles": (UpdateFilesArgs, lambda a: self.update_files(a.updates).model_dump()),
            "preliminaryResponse": (ResponseTextArgs, lambda a: self._ack(self.emit_preliminary_text(a.text))),
        }

    # ----- file tools -----

    def list_files(self) -> List[str]:
        return list_paths(self.tree)

    def read_files(self, paths: Sequence[str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for p in paths:
            try:
                out[p] = read_file(self.tree, p)
            except PathResolutionError as ex:
                out[p] = f"Error: {ex}"
        return out

    def update_files(self, updates: Sequence[EditOperation]) -> UpdateFilesResult:
        result = UpdateFilesResult()
        by_file: Dict[str, List[EditOperation]] = {}
        for op in updates:
            by_file.setdefault(_file_key(op.filepath), []).append(op)

        for path, ops in by_file.items():
            try:
                validate_relative_path(path)
                contents = read_file(self.tree, path)
                for i, op in enumerate(ops):
                    try:
                        contents = apply_edit(contents, op)
                    except (AnchorNotFoundError, EditValidationError) as ex:
                        raise _EditFailed(i, len(ops), ex) from ex
                write_file(self.tree, path, contents)
            except (PathResolutionError, ValueError, _EditFailed) as ex:
                logger.warning("updateFiles: %s: %s", path, ex)
                result.errors[path] = str(ex)
                self.errors[path] = str(ex)
                continue

            result.results[path] = contents
            self.errors.pop(path, None)
            self.changes.extend(
                AppliedEdit(type=op.type, filepath=path, old_code=op.old_code, new_code=op.new_code)
                for op in ops
            )
        return result

    # ----- response tools -----

    def _emit_turn(self, text: str, finish_reason: Optional[str], is_continued: bool, usage: Usage) -> str:
        self.writer.start()
        for piece in chunk_text(text, self.chunk_size):
            self.writer.text(piece)
        if finish_reason is not None:
            self.writer.finish(finish_reason, usage=usage, is_continued=is_continued)
        self.emitted.append(text)
        return text

    def emit_preliminary_text(self, text: str, usage: Usage = Usage()) -> str:
        return self._emit_turn(text, "other", True, usage)

    def emit_step_text(self, text: str, usage: Usage = Usage()) -> str:
        return self._emit_turn(text, "other", True, usage)

    def emit_concluding_text(self, text: str, usage: Usage = Usage(), final: bool = True,
                             hold_finish: bool = False) -> str:
        """With ``hold_finish`` the turn is left open; the caller writes its finish frame."""
        if hold_finish:
            return self._emit_turn(text, None, False, usage)
        if final:
            return self._emit_turn(text, "stop", False, usage)
        return self._emit_turn(text, "other", True, usage)

    @staticmethod
    def _ack(text: str) -> Dict[str, Any]:
        return {"delivered": True, "length": len(text)}

    # ----- dispatch -----

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def validate(self, name: str, arguments: Optional[Dict[str, Any]]) -> BaseModel:
        if name not in self._tools:
            raise ToolValidationError(name, "unknown tool")
        schema, _ = self._tools[name]
        try:
            return schema.model_validate(arguments or {})
        except ValidationError as ex:
            raise ToolValidationError(name, _validation_detail(ex)) from ex

    def dispatch(self, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            args = self.validate(name, arguments)
        except ToolValidationError as ex:
            logger.info("rejected tool call %s: %s", name, ex.detail)
            return {"status": "error", "tool": name, "error": f"ValidationError: {ex.detail}"}
        fn: Callable[[Any], Any] = self._tools[name][1]
        return {"status": "ok", "tool": name, "data": fn(args)}
