# sitewright/services/stream.py
"""
Line-framed response stream.

Every frame is ``<code>:<json>\\n``:

    f:{"messageId":"msg-..."}      message start (turn boundary)
    0:"text"                       text chunk
    e:{"finishReason":...,...}     finish with usage counters
    3:"message"                    error (terminal)
"""
from __future__ import annotations

import json
import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

START = "f"
TEXT = "0"
FINISH = "e"
ERROR = "3"


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
        )


@dataclass(frozen=True)
class StartFrame:
    message_id: str


@dataclass(frozen=True)
class TextFrame:
    text: str


@dataclass(frozen=True)
class FinishFrame:
    finish_reason: str
    usage: Usage = field(default_factory=Usage)
    is_continued: bool = False


@dataclass(frozen=True)
class ErrorFrame:
    message: str


Frame = Union[StartFrame, TextFrame, FinishFrame, ErrorFrame]


class FrameDecodeError(ValueError):
    pass


def new_message_id() -> str:
    return "msg-" + uuid.uuid4().hex[:24]


def encode_frame(frame: Frame) -> str:
    if isinstance(frame, StartFrame):
        payload = json.dumps({"messageId": frame.message_id}, separators=(",", ":"))
        return f"{START}:{payload}\n"
    if isinstance(frame, TextFrame):
        return f"{TEXT}:{json.dumps(frame.text)}\n"
    if isinstance(frame, FinishFrame):
        payload = json.dumps(
            {
                "finishReason": frame.finish_reason,
                "usage": {
                    "promptTokens": frame.usage.prompt_tokens,
                    "completionTokens": frame.usage.completion_tokens,
                },
                "isContinued": frame.is_continued,
            },
            separators=(",", ":"),
        )
        return f"{FINISH}:{payload}\n"
    if isinstance(frame, ErrorFrame):
        return f"{ERROR}:{json.dumps(frame.message)}\n"
    raise TypeError(f"Unknown frame type: {type(frame).__name__}")


def decode_frame(line: str) -> Frame:
    line = line.rstrip("\n")
    code, sep, raw = line.partition(":")
    if not sep:
        raise FrameDecodeError(f"Missing frame code separator: {line[:40]!r}")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise FrameDecodeError(f"Invalid frame payload for {code!r}: {ex}") from ex

    if code == START:
        if not isinstance(payload, dict) or not isinstance(payload.get("messageId"), str):
            raise FrameDecodeError("Start frame requires messageId")
        return StartFrame(message_id=payload["messageId"])
    if code == TEXT:
        if not isinstance(payload, str):
            raise FrameDecodeError("Text frame payload must be a string")
        return TextFrame(text=payload)
    if code == FINISH:
        if not isinstance(payload, dict) or "finishReason" not in payload:
            raise FrameDecodeError("Finish frame requires finishReason")
        usage = payload.get("usage") or {}
        return FinishFrame(
            finish_reason=payload["finishReason"],
            usage=Usage(
                prompt_tokens=int(usage.get("promptTokens", 0)),
                completion_tokens=int(usage.get("completionTokens", 0)),
            ),
            is_continued=bool(payload.get("isContinued", False)),
        )
    if code == ERROR:
        return ErrorFrame(message=str(payload))
    raise FrameDecodeError(f"Unknown frame code: {code!r}")


def decode_stream(data: Union[str, Iterable[str]]) -> List[Frame]:
    lines = data.splitlines() if isinstance(data, str) else data
    return [decode_frame(line) for line in lines if line.strip()]


def chunk_text(text: str, size: int = 20) -> List[str]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [text[i:i + size] for i in range(0, len(text), size)]


class StreamWriter:
    """
    Single-writer, append-only frame sink.

    Producers call the ``start``/``text``/``finish``/``error`` helpers from the
    run thread; the HTTP response drains ``iter_lines()``. After
    ``disconnect()`` further writes are dropped.
    """

    _EOF = object()

    def __init__(self):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._disconnected = False
        self.frames: List[Frame] = []

    @property
    def disconnected(self) -> bool:
        return self._disconnected

    def write(self, frame: Frame) -> None:
        with self._lock:
            if self._closed or self._disconnected:
                return
            self.frames.append(frame)
            self._queue.put(encode_frame(frame))

    def start(self, message_id: Optional[str] = None) -> str:
        mid = message_id or new_message_id()
        self.write(StartFrame(message_id=mid))
        return mid

    def text(self, text: str) -> None:
        self.write(TextFrame(text=text))

    def finish(self, finish_reason: str, usage: Usage = Usage(), is_continued: bool = False) -> None:
        self.write(FinishFrame(finish_reason=finish_reason, usage=usage, is_continued=is_continued))

    def error(self, message: str) -> None:
        self.write(ErrorFrame(message=message))

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(self._EOF)

    def disconnect(self) -> None:
        with self._lock:
            if not self._disconnected:
                logger.info("stream consumer disconnected; dropping further writes")
            self._disconnected = True

    def iter_lines(self) -> Iterator[str]:
        try:
            while True:
                item = self._queue.get()
                if item is self._EOF:
                    return
                yield item
        finally:
            if not self._closed:
                self.disconnect()

    def getvalue(self) -> str:
        return "".join(encode_frame(f) for f in self.frames)
