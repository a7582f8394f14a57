# sitewright/core/errors.py
from __future__ import annotations


class SitewrightError(Exception):
    pass


class PathResolutionError(SitewrightError):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class NotFoundError(PathResolutionError):
    def __init__(self, path: str):
        super().__init__(path, f"File not found: {path}")


class NotAFileError(PathResolutionError):
    def __init__(self, path: str):
        super().__init__(path, f"Not a file: {path}")


class NotADirError(PathResolutionError):
    def __init__(self, path: str):
        super().__init__(path, f"Not a directory: {path}")


class TreeFormatError(SitewrightError):
    pass


class EditValidationError(SitewrightError, ValueError):
    pass


class AnchorNotFoundError(SitewrightError):
    def __init__(self, old_code: str):
        preview = old_code if len(old_code) <= 60 else old_code[:57] + "..."
        super().__init__(f"Anchor not found in file contents: {preview!r}")
        self.old_code = old_code


class ToolValidationError(SitewrightError):
    def __init__(self, tool: str, detail: str):
        super().__init__(f"Invalid arguments for {tool}: {detail}")
        self.tool = tool
        self.detail = detail


class ModelTransportError(SitewrightError):
    """Model call failed: network, HTTP status, or unusable output."""


class FormatError(SitewrightError):
    pass


class ProjectNotFoundError(SitewrightError):
    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id
