# sitewright/services/bootstrap.py
from __future__ import annotations

import logging
from typing import Tuple

from sitewright.core.errors import ModelTransportError
from sitewright.core.profiling import profile
from sitewright.core.schema import INITIAL_PROJECT_SCHEMA
from sitewright.core.templates import starter_files
from sitewright.models.file_tree import FileSystemTree, write_file
from sitewright.services.prompt_builder import (
    build_initial_project_messages,
    build_preliminary_messages,
    build_title_messages,
)
from sitewright.services.update_plan import strip_code_fences
from sitewright.services.validation import validate_initial_project

logger = logging.getLogger(__name__)

MAX_TITLE_CHARS = 60


def fallback_title(prompt: str) -> str:
    words = prompt.split()[:4]
    return " ".join(words)[:MAX_TITLE_CHARS] or "Untitled Project"


def generate_title(client, prompt: str) -> str:
    with profile("generate_title"):
        try:
            title = client.chat(build_title_messages(prompt), max_tokens=30).content
        except ModelTransportError:
            logger.warning("title generation failed; deriving title from prompt", exc_info=True)
            return fallback_title(prompt)
    title = title.strip().strip('"').strip("'").splitlines()[0].strip() if title.strip() else ""
    return title[:MAX_TITLE_CHARS] or fallback_title(prompt)


def generate_initial_project(client, prompt: str, entry_file: str = "src/App.tsx") -> Tuple[FileSystemTree, str]:
    """Create the first version of a project: starter template plus a generated entry file."""
    with profile("generate_initial_project"):
        preliminary = client.chat(build_preliminary_messages([], prompt, window=0)).content.strip()
        obj = client.chat_structured(build_initial_project_messages(prompt, preliminary), INITIAL_PROJECT_SCHEMA)
        initial = validate_initial_project(obj)

    files = starter_files()
    write_file(files, entry_file, strip_code_fences(initial.file))
    overview = f"{preliminary}\n\n{initial.overview}" if preliminary else initial.overview
    return files, overview
