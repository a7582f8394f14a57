# sitewright/services/projects.py
"""
Project and message persistence.

Each project owns an ordered list of messages; a message may own one
file-version snapshot. The current files of a project are the snapshot of
its newest message that has one. Snapshots are stored serialized, so a
stored version cannot be mutated through a tree handed out earlier.
"""
from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sitewright.core.errors import ProjectNotFoundError
from sitewright.models.file_tree import FileSystemTree, tree_from_json, tree_to_json

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StoredMessage:
    id: str
    type: str  # "USER" | "ASSISTANT"
    contents: str
    created_at: str
    files: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "contents": self.contents,
            "createdAt": self.created_at,
        }
        if self.files is not None:
            data["fileVersion"] = {"files": copy.deepcopy(self.files)}
        return data


@dataclass
class Project:
    id: str
    user_id: str
    title: str
    created_at: str
    messages: List[StoredMessage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "createdAt": self.created_at,
            "messages": [m.to_dict() for m in self.messages],
        }


class InMemoryProjectStore:
    def __init__(self):
        self._projects: Dict[str, Project] = {}
        self._lock = threading.RLock()

    def _get(self, project_id: str, user_id: Optional[str] = None) -> Project:
        project = self._projects.get(project_id)
        if project is None or (user_id is not None and project.user_id != user_id):
            raise ProjectNotFoundError(project_id)
        return project

    def create_project(self, user_id: str, title: str, contents: str,
                       files: Optional[FileSystemTree] = None) -> Project:
        with self._lock:
            project = Project(id=uuid.uuid4().hex, user_id=user_id, title=title, created_at=_now())
            self._projects[project.id] = project
            self._append(project, "USER", contents, files)
            logger.info("created project %s for user %s", project.id, user_id)
            return copy.deepcopy(project)

    def get_project(self, project_id: str, user_id: Optional[str] = None) -> Project:
        with self._lock:
            return copy.deepcopy(self._get(project_id, user_id))

    def list_projects(self, user_id: str) -> List[Project]:
        with self._lock:
            owned = [p for p in self._projects.values() if p.user_id == user_id]
            return [copy.deepcopy(p) for p in sorted(owned, key=lambda p: p.created_at, reverse=True)]

    def delete_project(self, project_id: str, user_id: str) -> None:
        with self._lock:
            self._get(project_id, user_id)
            del self._projects[project_id]

    def update_project_title(self, project_id: str, user_id: str, title: str) -> Project:
        with self._lock:
            project = self._get(project_id, user_id)
            project.title = title
            return copy.deepcopy(project)

    def _append(self, project: Project, type_: str, contents: str,
                files: Optional[FileSystemTree]) -> StoredMessage:
        message = StoredMessage(
            id=uuid.uuid4().hex,
            type=type_,
            contents=contents,
            created_at=_now(),
            files=tree_to_json(files) if files is not None else None,
        )
        project.messages.append(message)
        return message

    def create_project_message(self, project_id: str, contents: str, type_: str = "USER",
                               files: Optional[FileSystemTree] = None) -> Project:
        with self._lock:
            project = self._get(project_id)
            self._append(project, type_, contents, files)
            return copy.deepcopy(project)

    def create_project_update_messages(self, project_id: str, prompt: str, files: FileSystemTree,
                                       explanation: str, is_initial_generation: bool = False) -> None:
        """Record one run: the user's prompt (unless it opened the project) and the assistant reply."""
        with self._lock:
            project = self._get(project_id)
            if not is_initial_generation:
                self._append(project, "USER", prompt, files)
            self._append(project, "ASSISTANT", explanation, files)

    def get_current_project_files(self, project_id: str) -> FileSystemTree:
        with self._lock:
            project = self._get(project_id)
            for message in reversed(project.messages):
                if message.files is not None:
                    return tree_from_json(message.files)
        logger.info("project %s has no file version yet", project_id)
        return FileSystemTree()
