# sitewright/services/orchestrator.py
"""
Change-request orchestration.

One run: classify complexity and stream a preliminary reply in parallel,
drive the tool-calling loop against a clone of the project tree, then
summarise what actually changed. The caller's tree is never touched; if a
model call fails the exception propagates and the clone is dropped.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Tuple

from sitewright.core.config import ModelConfig, Settings
from sitewright.core.profiling import profile
from sitewright.core.schema import TOOL_DEFINITIONS
from sitewright.models.chat import AppliedEdit, Message
from sitewright.models.file_tree import FileSystemTree, clone
from sitewright.services.coerce import coerce_to_tool_calls
from sitewright.services.formatter import SourceFormatter
from sitewright.services.ollama_client import OllamaClient
from sitewright.services.prompt_builder import (
    build_agent_messages,
    build_complexity_messages,
    build_concluding_messages,
    build_preliminary_messages,
)
from sitewright.services.stream import StreamWriter, Usage
from sitewright.services.tools import ProjectTools
from sitewright.services.update_plan import PlanOutcome, UpdatePlanner

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ModelConfig], Any]

CLASSIFY_MAX_TOKENS = 100
CONCLUDING_MAX_TOKENS = 200


@dataclass
class RunResult:
    files: FileSystemTree
    commentary: List[str]
    complexity: str = "base"
    steps: int = 0
    changes: List[AppliedEdit] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    usage: Usage = field(default_factory=Usage)
    final_usage: Usage = field(default_factory=Usage)

    @property
    def explanation(self) -> str:
        return "\n\n".join(t for t in self.commentary if t)


class Orchestrator:
    def __init__(self, settings: Settings, client_factory: ClientFactory = OllamaClient,
                 formatter: SourceFormatter | None = None):
        self.settings = settings
        self.client_factory = client_factory
        self.formatter = formatter or SourceFormatter(settings.formatter)

    def _client(self, config: ModelConfig):
        return self.client_factory(config)

    # ----- phases -----

    def classify(self, history: Sequence[Message], prompt: str) -> str:
        with profile("classify"):
            try:
                client = self._client(self.settings.base_model)
                result = client.chat(build_complexity_messages(history, prompt), max_tokens=CLASSIFY_MAX_TOKENS)
                complexity = "complex" if result.content.strip().lower() == "complex" else "base"
            except Exception:
                logger.warning("complexity check failed; falling back to base model", exc_info=True)
                return "base"
        logger.info("complexity check: using %s model configuration", complexity)
        return complexity

    def preliminary_response(self, history: Sequence[Message], prompt: str,
                             writer: StreamWriter) -> Tuple[str, Usage]:
        with profile("preliminary_response"):
            client = self._client(self.settings.base_model)
            messages = build_preliminary_messages(history, prompt, self.settings.history_window)
            writer.start()
            result = client.chat_stream(messages, on_chunk=writer.text)
            writer.finish("other", usage=result.usage, is_continued=True)
        return result.content.strip(), result.usage

    def run_agent_loop(self, history: Sequence[Message], prompt: str, tools: ProjectTools,
                       model: ModelConfig) -> Tuple[int, Usage]:
        client = self._client(model)
        messages: List[Dict[str, Any]] = build_agent_messages(history, prompt)
        usage = Usage()
        steps = 0

        with profile("agent_loop"):
            while steps < self.settings.max_steps:
                steps += 1
                result = client.chat(messages, tools=TOOL_DEFINITIONS)
                usage = usage + result.usage
                calls = coerce_to_tool_calls(result.tool_calls)
                logger.debug("step %d: %d tool call(s), %d chars of text", steps, len(calls), len(result.content))

                text = result.content.strip()
                if text:
                    tools.emit_step_text(text, usage=result.usage)

                assistant: Dict[str, Any] = {"role": "assistant", "content": result.content}
                if result.tool_calls:
                    assistant["tool_calls"] = result.tool_calls
                messages.append(assistant)

                if not calls:
                    break
                for call in calls:
                    out = tools.dispatch(call.name, call.arguments)
                    messages.append({
                        "role": "tool",
                        "tool_name": call.name,
                        "content": json.dumps(out, ensure_ascii=False),
                    })
            else:
                logger.info("step budget of %d exhausted; keeping changes applied so far", self.settings.max_steps)
        return steps, usage

    def concluding_response(self, updates: Sequence[Dict[str, Any]], errors: Dict[str, str],
                            tools: ProjectTools, hold_finish: bool = False) -> Tuple[str, Usage]:
        with profile("concluding_response"):
            client = self._client(self.settings.base_model)
            result = client.chat(build_concluding_messages(updates, errors), max_tokens=CONCLUDING_MAX_TOKENS)
            text = result.content.strip()
            tools.emit_concluding_text(text, usage=result.usage, final=True, hold_finish=hold_finish)
        return text, result.usage

    def _open(self, history: Sequence[Message], prompt: str, writer: StreamWriter) -> Tuple[str, str, Usage]:
        # classification and the preliminary reply are independent; join both
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sitewright-open") as pool:
            complexity_f = pool.submit(self.classify, history, prompt)
            preliminary_f = pool.submit(self.preliminary_response, history, prompt, writer)
            preliminary, usage = preliminary_f.result()
            complexity = complexity_f.result()
        return complexity, preliminary, usage

    # ----- entry points -----

    def run(self, history: Sequence[Message], prompt: str, files: FileSystemTree,
            writer: StreamWriter, hold_finish: bool = False) -> RunResult:
        """
        Apply one change request to a clone of ``files``.

        With ``hold_finish`` the concluding turn is left without its finish
        frame so the caller can end the stream once the result is saved.
        """
        with profile("generate_project_updates"):
            tree = clone(files)
            tools = ProjectTools(tree, writer, self.settings.chunk_size)

            complexity, preliminary, usage = self._open(history, prompt, writer)
            model = self.settings.model_for(complexity)
            if complexity == "complex":
                logger.info("switching to complex model %s for project updates", model.model)

            steps, loop_usage = self.run_agent_loop(history, prompt, tools, model)
            updates = [c.model_dump(exclude_none=True) for c in tools.changes]
            _, final_usage = self.concluding_response(updates, dict(tools.errors), tools, hold_finish)

        return RunResult(
            files=tree,
            commentary=[preliminary] + list(tools.emitted),
            complexity=complexity,
            steps=steps,
            changes=list(tools.changes),
            errors=dict(tools.errors),
            usage=usage + loop_usage + final_usage,
            final_usage=final_usage,
        )

    def run_plan(self, history: Sequence[Message], prompt: str, files: FileSystemTree,
                 writer: StreamWriter, hold_finish: bool = False) -> RunResult:
        with profile("generate_planned_updates"):
            tree = clone(files)
            tools = ProjectTools(tree, writer, self.settings.chunk_size)

            complexity, preliminary, usage = self._open(history, prompt, writer)
            planner = UpdatePlanner(self._client(self.settings.model_for(complexity)), self.formatter)
            outcomes = planner.run(prompt, tree, self.settings.plan_files)

            updates, errors = _summarise_outcomes(outcomes)
            _, final_usage = self.concluding_response(updates, errors, tools, hold_finish)

        return RunResult(
            files=tree,
            commentary=[preliminary] + list(tools.emitted),
            complexity=complexity,
            steps=len(outcomes),
            errors=errors,
            usage=usage + final_usage,
            final_usage=final_usage,
        )


def _summarise_outcomes(outcomes: Sequence[PlanOutcome]) -> Tuple[List[Dict[str, Any]], Dict[str, str]]:
    updates: List[Dict[str, Any]] = []
    errors: Dict[str, str] = {}
    for o in outcomes:
        if not o.result.success:
            errors[o.file_path] = o.result.message
            continue
        for u in (o.plan.updates if o.plan else []):
            updates.append({"filepath": o.file_path, "type": u.type, "context": u.context})
    return updates, errors
