# sitewright/services/ollama_client.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests as http_requests

from sitewright.core.config import ModelConfig
from sitewright.core.errors import ModelTransportError
from sitewright.services.stream import Usage

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    content: str = ""
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    done_reason: Optional[str] = None


def _usage_from(data: Dict[str, Any]) -> Usage:
    return Usage(
        prompt_tokens=int(data.get("prompt_eval_count") or 0),
        completion_tokens=int(data.get("eval_count") or 0),
    )


class OllamaClient:
    """Thin client for Ollama's ``/api/chat``. All failures surface as ``ModelTransportError``."""

    def __init__(self, config: ModelConfig, session: Optional[http_requests.Session] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.url = f"{self.base_url}/api/chat"
        self.session = session or http_requests.Session()

    def _payload(self, messages: List[Dict[str, Any]], stream: bool, max_tokens: Optional[int]) -> Dict[str, Any]:
        options: Dict[str, Any] = {"temperature": self.config.temperature}
        limit = max_tokens if max_tokens is not None else self.config.max_tokens
        if limit is not None:
            options["num_predict"] = limit
        return {
            "model": self.config.model,
            "stream": stream,
            "messages": messages,
            "options": options,
        }

    def _post(self, payload: Dict[str, Any], stream: bool = False) -> http_requests.Response:
        logger.debug("POST %s model=%s messages=%d stream=%s",
                     self.url, payload["model"], len(payload["messages"]), stream)
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.config.timeout, stream=stream)
            resp.raise_for_status()
        except http_requests.HTTPError as ex:
            status = ex.response.status_code if ex.response is not None else "?"
            raise ModelTransportError(f"Ollama returned HTTP {status} for model {self.config.model}") from ex
        except http_requests.RequestException as ex:
            raise ModelTransportError(f"Cannot reach Ollama at {self.base_url}: {type(ex).__name__}") from ex
        return resp

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatResult:
        payload = self._payload(messages, stream=False, max_tokens=max_tokens)
        if tools:
            payload["tools"] = tools
        resp = self._post(payload)
        try:
            data = resp.json()
        except ValueError as ex:
            raise ModelTransportError("Ollama returned a non-JSON body") from ex

        if data.get("error"):
            raise ModelTransportError(f"Ollama error: {data['error']}")
        message = data.get("message") or {}
        return ChatResult(
            content=message.get("content") or "",
            tool_calls=message.get("tool_calls") or [],
            usage=_usage_from(data),
            done_reason=data.get("done_reason"),
        )

    def chat_stream(
        self,
        messages: List[Dict[str, Any]],
        on_chunk: Callable[[str], None],
        max_tokens: Optional[int] = None,
    ) -> ChatResult:
        payload = self._payload(messages, stream=True, max_tokens=max_tokens)
        resp = self._post(payload, stream=True)
        parts: List[str] = []
        usage = Usage()
        done_reason = None
        try:
            for line in resp.iter_lines(decode_unicode=True):
                if not line:
                    continue
                try:
                    chunk = json.loads(line)
                except json.JSONDecodeError as ex:
                    raise ModelTransportError(f"Malformed stream chunk from Ollama: {line[:80]!r}") from ex
                if chunk.get("error"):
                    raise ModelTransportError(f"Ollama error: {chunk['error']}")
                piece = (chunk.get("message") or {}).get("content") or ""
                if piece:
                    parts.append(piece)
                    on_chunk(piece)
                if chunk.get("done"):
                    usage = _usage_from(chunk)
                    done_reason = chunk.get("done_reason")
                    break
        except http_requests.RequestException as ex:
            raise ModelTransportError(f"Stream from Ollama interrupted: {type(ex).__name__}") from ex
        finally:
            resp.close()
        return ChatResult(content="".join(parts), usage=usage, done_reason=done_reason)

    def chat_structured(self, messages: List[Dict[str, Any]], schema: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._payload(messages, stream=False, max_tokens=None)
        payload["format"] = schema
        resp = self._post(payload)
        try:
            data = resp.json()
        except ValueError as ex:
            raise ModelTransportError("Ollama returned a non-JSON body") from ex
        content = (data.get("message") or {}).get("content")

        if isinstance(content, dict):
            return content
        if isinstance(content, str):
            try:
                obj = json.loads(content)
            except json.JSONDecodeError as ex:
                raise ModelTransportError("Structured output was not valid JSON") from ex
            if not isinstance(obj, dict):
                raise ModelTransportError("Structured output must be a JSON object")
            return obj
        raise ModelTransportError("Ollama returned invalid content type")
