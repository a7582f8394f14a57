import threading
from typing import Any, Dict, List

import pytest

from sitewright.core import prompt as prompts
from sitewright.core.config import ModelConfig, Settings
from sitewright.core.errors import ModelTransportError
from sitewright.models.file_tree import FileSystemTree, write_file
from sitewright.services.ollama_client import ChatResult
from sitewright.services.stream import Usage

SYSTEM_KINDS = {
    prompts.COMPLEXITY_SYSTEM_PROMPT: "classify",
    prompts.PRELIMINARY_SYSTEM_PROMPT: "preliminary",
    prompts.AGENT_SYSTEM_PROMPT: "agent",
    prompts.CONCLUDING_SYSTEM_PROMPT: "concluding",
    prompts.REWRITE_SYSTEM_PROMPT: "rewrite",
    prompts.TITLE_SYSTEM_PROMPT: "title",
}


def message_kind(messages: List[Dict[str, Any]]) -> str:
    system = messages[0]["content"] if messages and messages[0]["role"] == "system" else ""
    if system in SYSTEM_KINDS:
        return SYSTEM_KINDS[system]
    if "plan edits to a single source file" in system:
        return "plan"
    if "initial src/App.tsx" in system:
        return "initial"
    return "unknown"


def tool_call(name: str, **arguments) -> Dict[str, Any]:
    return {"function": {"name": name, "arguments": arguments}}


def step(content: str = "", *calls: Dict[str, Any]) -> ChatResult:
    return ChatResult(content=content, tool_calls=list(calls), usage=Usage(10, 5))


class FakeModel:
    """
    Scripted stand-in for the model server.

    ``steps`` feeds the agent loop in order; an exception instance in the
    list is raised instead of returned. ``fail`` maps a call kind to the
    exception raised for every call of that kind.
    """

    def __init__(self, complexity="base", preliminary="Sure, updating the page now.",
                 steps=None, concluding="I updated the greeting.", structured=None,
                 rewrite="", title="Sunny Todo", fail=None):
        self.complexity = complexity
        self.preliminary = preliminary
        self.steps = list(steps or [])
        self.concluding = concluding
        self.structured = dict(structured or {})
        self.rewrite = rewrite
        self.title = title
        self.fail = dict(fail or {})
        self.calls = []
        self._lock = threading.Lock()

    def factory(self, config: ModelConfig) -> "FakeClient":
        return FakeClient(self, config)

    def record(self, kind: str, config: ModelConfig, messages) -> None:
        with self._lock:
            self.calls.append((kind, config.model, messages))
        if kind in self.fail:
            raise self.fail[kind]

    def kinds(self) -> List[str]:
        return [c[0] for c in self.calls]

    def models_for(self, kind: str) -> List[str]:
        return [c[1] for c in self.calls if c[0] == kind]


class FakeClient:
    def __init__(self, model: FakeModel, config: ModelConfig):
        self.model = model
        self.config = config

    def chat(self, messages, tools=None, max_tokens=None) -> ChatResult:
        kind = message_kind(messages)
        self.model.record(kind, self.config, [dict(m) for m in messages])
        if kind == "classify":
            return ChatResult(content=self.model.complexity, usage=Usage(3, 1))
        if kind == "agent":
            if not self.model.steps:
                return ChatResult(content="")
            nxt = self.model.steps.pop(0)
            if isinstance(nxt, Exception):
                raise nxt
            return nxt
        if kind == "concluding":
            return ChatResult(content=self.model.concluding, usage=Usage(7, 4))
        if kind == "rewrite":
            return ChatResult(content=self.model.rewrite)
        if kind == "title":
            return ChatResult(content=self.model.title)
        if kind == "preliminary":
            return ChatResult(content=self.model.preliminary)
        raise AssertionError(f"unexpected chat call: {kind}")

    def chat_stream(self, messages, on_chunk, max_tokens=None) -> ChatResult:
        kind = message_kind(messages)
        self.model.record(kind, self.config, [dict(m) for m in messages])
        text = self.model.preliminary
        for i in range(0, len(text), 8):
            on_chunk(text[i:i + 8])
        return ChatResult(content=text, usage=Usage(12, 6))

    def chat_structured(self, messages, schema) -> Dict[str, Any]:
        kind = message_kind(messages)
        self.model.record(kind, self.config, [dict(m) for m in messages])
        value = self.model.structured.get(kind)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise ModelTransportError(f"no structured output scripted for {kind}")
        return value


@pytest.fixture
def settings():
    return Settings(
        base_model=ModelConfig(model="base-model"),
        complex_model=ModelConfig(model="complex-model"),
        max_steps=5,
        formatter="",
    )


@pytest.fixture
def project_tree():
    tree = FileSystemTree()
    write_file(tree, "package.json", '{"name": "demo"}\n')
    write_file(tree, "src/App.tsx", "export default function App() {\n  return <h1>Hello</h1>;\n}\n")
    write_file(tree, "src/index.css", "body { margin: 0; }\n")
    return tree
