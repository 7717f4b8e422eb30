"""Application configuration loaded from environment variables."""

from dataclasses import dataclass
import logging
import os

from src.prompts.persona import DEFAULT_PERSONA
from src.services.completion_service import DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS
from src.services.window_service import DEFAULT_WINDOW_SIZE
from src.stores.messages import DEFAULT_THREAD_INDEX

DEFAULT_AWS_REGION = "ap-northeast-1"


@dataclass(frozen=True)
class AppConfig:
    slack_bot_token: str
    slack_signing_secret: str
    openai_api_key: str
    messages_table_name: str
    messages_thread_index: str = DEFAULT_THREAD_INDEX
    aws_region: str = DEFAULT_AWS_REGION
    openai_model: str = DEFAULT_MODEL
    openai_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    window_size: int = DEFAULT_WINDOW_SIZE
    persona: str = DEFAULT_PERSONA
    slack_app_token: str | None = None
    log_level: str = "INFO"


def _number(name: str, default, cast):
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def load_config() -> AppConfig:
    slack_bot_token = os.environ.get("SLACK_BOT_TOKEN")
    slack_signing_secret = os.environ.get("SLACK_SIGNING_SECRET")
    openai_api_key = os.environ.get("OPENAI_API_KEY")
    messages_table_name = os.environ.get("MESSAGES_TABLE_NAME")

    missing = []
    if not slack_bot_token:
        missing.append("SLACK_BOT_TOKEN")
    if not slack_signing_secret:
        missing.append("SLACK_SIGNING_SECRET")
    if not openai_api_key:
        missing.append("OPENAI_API_KEY")
    if not messages_table_name:
        missing.append("MESSAGES_TABLE_NAME")

    if missing:
        names = ", ".join(missing)
        raise RuntimeError(f"Missing required environment variables: {names}")

    window_size = _number("THREAD_WINDOW_SIZE", DEFAULT_WINDOW_SIZE, int)
    if window_size < 1:
        raise RuntimeError(f"THREAD_WINDOW_SIZE must be at least 1, got {window_size}")

    log_level = (os.environ.get("LOG_LEVEL") or "INFO").upper()
    # getLevelName maps known names to their numeric level
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    return AppConfig(
        slack_bot_token=slack_bot_token or "",
        slack_signing_secret=slack_signing_secret or "",
        openai_api_key=openai_api_key or "",
        messages_table_name=messages_table_name or "",
        messages_thread_index=os.environ.get("MESSAGES_THREAD_INDEX") or DEFAULT_THREAD_INDEX,
        aws_region=os.environ.get("AWS_REGION") or DEFAULT_AWS_REGION,
        openai_model=os.environ.get("OPENAI_MODEL") or DEFAULT_MODEL,
        openai_timeout_seconds=_number("OPENAI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float),
        window_size=window_size,
        persona=os.environ.get("BOT_PERSONA") or DEFAULT_PERSONA,
        slack_app_token=os.environ.get("SLACK_APP_TOKEN"),
        log_level=log_level,
    )
