# sitewright/services/update_plan.py
"""
Plan-then-apply editing.

Phase A asks the model for a structured ``UpdatePlan`` for one file. Phase B
has the model rewrite the whole file with the plan embedded in the prompt,
then runs the formatting pass. A failure in either phase is reported for
that file only.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sitewright.core.errors import FormatError, ModelTransportError, PathResolutionError
from sitewright.core.profiling import profile
from sitewright.core.schema import UPDATE_PLAN_SCHEMA
from sitewright.models.chat import PlanApplyResult, UpdatePlan
from sitewright.models.file_tree import FileSystemTree, read_file, write_file
from sitewright.services.formatter import SourceFormatter
from sitewright.services.prompt_builder import build_plan_messages, build_rewrite_messages
from sitewright.services.validation import validate_update_plan

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[\w.+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    m = _FENCE_RE.match(text)
    return m.group(1) if m else text


@dataclass
class PlanOutcome:
    file_path: str
    result: PlanApplyResult
    plan: Optional[UpdatePlan] = None


class UpdatePlanner:
    def __init__(self, client, formatter: Optional[SourceFormatter] = None):
        self.client = client
        self.formatter = formatter or SourceFormatter()

    def plan(self, objective: str, tree: FileSystemTree, file_path: str) -> UpdatePlan:
        try:
            contents = read_file(tree, file_path)
        except PathResolutionError:
            contents = ""
        with profile(f"plan {file_path}"):
            obj = self.client.chat_structured(build_plan_messages(objective, file_path, contents), UPDATE_PLAN_SCHEMA)
        plan = validate_update_plan(obj)
        if plan.file_path != file_path:
            logger.info("plan targeted %s, pinning to %s", plan.file_path, file_path)
            plan = plan.model_copy(update={"file_path": file_path})
        return plan

    def apply(self, plan: UpdatePlan, tree: FileSystemTree) -> PlanApplyResult:
        path = plan.file_path
        if not plan.updates:
            return PlanApplyResult(success=True, message="No changes planned", file_path=path)
        try:
            original = read_file(tree, path)
        except PathResolutionError:
            original = ""

        try:
            with profile(f"rewrite {path}"):
                rewritten = self.client.chat(build_rewrite_messages(plan, original)).content
            rewritten = strip_code_fences(rewritten)
            if not rewritten.strip():
                raise ModelTransportError("model returned empty file contents")
            formatted = self.formatter.format(path, rewritten)
            write_file(tree, path, formatted)
        except (ModelTransportError, FormatError, PathResolutionError) as ex:
            logger.warning("plan update of %s failed: %s", path, ex)
            return PlanApplyResult(success=False, message=str(ex), file_path=path)

        return PlanApplyResult(
            success=True,
            message=f"Applied {len(plan.updates)} planned update(s)",
            file_path=path,
        )

    def run(self, objective: str, tree: FileSystemTree, file_paths: Sequence[str]) -> List[PlanOutcome]:
        outcomes: List[PlanOutcome] = []
        for path in file_paths:
            try:
                plan = self.plan(objective, tree, path)
            except ModelTransportError as ex:
                logger.warning("planning %s failed: %s", path, ex)
                outcomes.append(PlanOutcome(path, PlanApplyResult(success=False, message=str(ex), file_path=path)))
                continue
            outcomes.append(PlanOutcome(path, self.apply(plan, tree), plan))
        return outcomes
