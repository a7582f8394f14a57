# sitewright/services/formatter.py
from __future__ import annotations

import logging
import os
import shutil
import subprocess

from sitewright.core.errors import FormatError

logger = logging.getLogger(__name__)

FORMATTABLE = {".ts", ".tsx", ".js", ".jsx", ".mjs", ".css", ".json", ".html", ".md"}


class SourceFormatter:
    """
    Canonical formatting pass over generated sources, piped through prettier.

    Files prettier does not handle, or a missing prettier binary, pass through
    unchanged. A formatter that runs and rejects the input raises ``FormatError``.
    """

    def __init__(self, command: str = "prettier", timeout: float = 30.0):
        self.command = command
        self.timeout = timeout

    def available(self) -> bool:
        return bool(self.command) and shutil.which(self.command) is not None

    def format(self, path: str, source: str) -> str:
        ext = os.path.splitext(path)[1].lower()
        if ext not in FORMATTABLE:
            return source
        if not self.available():
            logger.debug("formatter %r not on PATH; leaving %s as generated", self.command, path)
            return source

        try:
            p = subprocess.run(
                [self.command, "--stdin-filepath", path],
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as ex:
            raise FormatError(f"{self.command} timed out formatting {path}") from ex
        except OSError as ex:
            raise FormatError(f"{self.command} could not be started: {ex}") from ex

        if p.returncode != 0:
            detail = (p.stderr or p.stdout or "").strip().splitlines()
            raise FormatError(f"{self.command} failed on {path}: {detail[0] if detail else f'exit={p.returncode}'}")
        return p.stdout
