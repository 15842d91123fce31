from __future__ import annotations

from pathlib import Path

import pytest

from quiz_arena.utils.settings import DEFAULT_DATA_PATH, AppSettings


def test_defaults_without_environment():
    settings = AppSettings.from_env({})
    assert settings.port == 8000
    assert settings.data_path == DEFAULT_DATA_PATH
    assert settings.teacher_password == "admin"
    assert settings.gemini_api_key is None


def test_environment_overrides():
    settings = AppSettings.from_env(
        {
            "QUIZ_ARENA_HOST": "127.0.0.1",
            "QUIZ_ARENA_PORT": "9000",
            "QUIZ_ARENA_DATA_PATH": "/tmp/arena.json",
            "QUIZ_ARENA_TEACHER_PASSWORD": "s3cret",
            "GEMINI_API_KEY": "key",
            "QUIZ_ARENA_LOG_LEVEL": "DEBUG",
        }
    )
    assert (settings.host, settings.port) == ("127.0.0.1", 9000)
    assert settings.data_path == Path("/tmp/arena.json")
    assert settings.gemini_api_key == "key"
    assert settings.log_level == "DEBUG"
    assert settings.check_teacher_password("s3cret")
    assert not settings.check_teacher_password("admin")


def test_empty_data_path_keeps_store_in_memory():
    assert AppSettings.from_env({"QUIZ_ARENA_DATA_PATH": ""}).data_path is None


def test_invalid_port_is_reported():
    with pytest.raises(ValueError, match="QUIZ_ARENA_PORT"):
        AppSettings.from_env({"QUIZ_ARENA_PORT": "eighty"})
