"""Runtime settings read from environment variables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path

from quiz_arena.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_arena.core.services.quiz_generator import DEFAULT_GEMINI_MODEL

DEFAULT_DATA_PATH = Path("quiz_arena_data.json")
DEFAULT_TEACHER_PASSWORD = "admin"


@dataclass(frozen=True, slots=True)
class AppSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    data_path: Path | None = DEFAULT_DATA_PATH
    teacher_password: str = DEFAULT_TEACHER_PASSWORD
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppSettings:
        env = os.environ if environ is None else environ

        raw_port = env.get("QUIZ_ARENA_PORT", "")
        try:
            port = int(raw_port) if raw_port else DEFAULT_PORT
        except ValueError as exc:
            raise ValueError(f"QUIZ_ARENA_PORT must be an integer, got {raw_port!r}") from exc

        # An empty value keeps everything in memory.
        raw_path = env.get("QUIZ_ARENA_DATA_PATH")
        if raw_path is None:
            data_path: Path | None = DEFAULT_DATA_PATH
        else:
            data_path = Path(raw_path) if raw_path.strip() else None

        return cls(
            host=env.get("QUIZ_ARENA_HOST", DEFAULT_HOST),
            port=port,
            data_path=data_path,
            teacher_password=env.get("QUIZ_ARENA_TEACHER_PASSWORD", DEFAULT_TEACHER_PASSWORD),
            gemini_api_key=env.get("GEMINI_API_KEY") or None,
            gemini_model=env.get("QUIZ_ARENA_GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            log_level=env.get("QUIZ_ARENA_LOG_LEVEL", "INFO"),
        )

    def check_teacher_password(self, password: str) -> bool:
        return password == self.teacher_password
