# sitewright/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ModelConfig:
    model: str
    base_url: str = "http://localhost:11434"
    timeout: float = 180.0
    temperature: float = 0.2
    max_tokens: int | None = None

    def with_max_tokens(self, max_tokens: int) -> "ModelConfig":
        return replace(self, max_tokens=max_tokens)


@dataclass(frozen=True)
class Settings:
    base_model: ModelConfig
    complex_model: ModelConfig
    max_steps: int = 7
    chunk_size: int = 20
    history_window: int = 10
    entry_file: str = "src/App.tsx"
    formatter: str = "prettier"
    log_level: str = "INFO"
    plan_files: tuple = ("src/App.tsx",)

    def model_for(self, complexity: str) -> ModelConfig:
        if complexity == "complex":
            return self.complex_model
        return self.base_model

    @staticmethod
    def from_env() -> "Settings":
        base = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
        timeout = float(os.getenv("OLLAMA_TIMEOUT", "180"))
        base_model = ModelConfig(
            model=os.getenv("SITEWRIGHT_BASE_MODEL", "qwen2.5-coder:14b"),
            base_url=base,
            timeout=timeout,
        )
        complex_model = ModelConfig(
            model=os.getenv("SITEWRIGHT_COMPLEX_MODEL", "qwen2.5-coder:32b"),
            base_url=os.getenv("SITEWRIGHT_COMPLEX_BASE_URL", base).rstrip("/"),
            timeout=timeout,
        )
        entry_file = os.getenv("SITEWRIGHT_ENTRY_FILE", "src/App.tsx")
        return Settings(
            base_model=base_model,
            complex_model=complex_model,
            max_steps=int(os.getenv("SITEWRIGHT_MAX_STEPS", "7")),
            chunk_size=int(os.getenv("SITEWRIGHT_CHUNK_SIZE", "20")),
            history_window=int(os.getenv("SITEWRIGHT_HISTORY_WINDOW", "10")),
            entry_file=entry_file,
            formatter=os.getenv("SITEWRIGHT_FORMATTER", "prettier"),
            log_level=os.getenv("SITEWRIGHT_LOG_LEVEL", "INFO").upper(),
            plan_files=(entry_file,),
        )
