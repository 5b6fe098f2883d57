"""Runtime configuration.

Settings come from environment variables.  Rate limits and content length
ceilings can additionally be overridden from a YAML file named by
``FREEDOMWALL_LIMITS_FILE``::

    rate_limits:
      post: {max_requests: 5, window_seconds: 60}
      contact: {max_requests: 5, window_seconds: 3600, message: "Slow down."}
    content_limits:
      comment_message: 500
      post_message: null      # no ceiling
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from freedomwall.ratelimit.limiter import DEFAULT_RULES, RateLimitRule

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


@dataclass
class ContentLimits:
    """Maximum lengths per text field.  ``None`` disables a ceiling."""

    name: Optional[int] = 100
    post_message: Optional[int] = 1000
    comment_message: Optional[int] = 200
    report_reason: Optional[int] = 200
    poll_question: Optional[int] = 300
    poll_option: Optional[int] = 100
    banned_word: Optional[int] = 100


@dataclass
class Settings:
    """Everything the application reads from its environment."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".freedomwall")
    admin_key: str = ""
    session_secret: str = ""
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    port: int = 5000
    environment: str = "development"
    log_level: str = "INFO"
    escape_html: bool = True
    multi_select_polls: bool = False
    device_like_check: bool = False
    auto_flag_threshold: int = 3
    rate_limits: dict[str, RateLimitRule] = field(default_factory=lambda: dict(DEFAULT_RULES))
    content_limits: ContentLimits = field(default_factory=ContentLimits)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if not self.session_secret:
            # Sessions will not survive a restart without a configured secret.
            self.session_secret = secrets.token_hex(32)

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        settings = cls(
            data_dir=Path(env.get("FREEDOMWALL_DATA_DIR", str(Path.home() / ".freedomwall"))),
            admin_key=env.get("ADMIN_KEY", ""),
            session_secret=env.get("SESSION_SECRET", ""),
            allowed_origins=_split_list(env.get("ALLOWED_ORIGINS")) or list(DEFAULT_ORIGINS),
            port=int(env.get("PORT", "5000")),
            environment=env.get("FREEDOMWALL_ENV", "development"),
            log_level=env.get("FREEDOMWALL_LOG_LEVEL", "INFO").upper(),
            escape_html=_as_bool(env.get("FREEDOMWALL_ESCAPE_HTML"), True),
            multi_select_polls=_as_bool(env.get("FREEDOMWALL_MULTI_SELECT_POLLS"), False),
            device_like_check=_as_bool(env.get("FREEDOMWALL_DEVICE_LIKE_CHECK"), False),
        )

        if not settings.admin_key:
            logger.warning("ADMIN_KEY is not set; admin endpoints will reject every request")

        limits_file = env.get("FREEDOMWALL_LIMITS_FILE")
        if limits_file:
            rate_limits, content_limits = load_limits(limits_file)
            settings.rate_limits.update(rate_limits)
            settings.content_limits = content_limits
        return settings


def load_limits(path: str | Path) -> tuple[dict[str, RateLimitRule], ContentLimits]:
    """Load rate-limit and content-limit overrides from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    rate_limits: dict[str, RateLimitRule] = {}
    for action_class, rule_data in (data.get("rate_limits") or {}).items():
        base = DEFAULT_RULES.get(action_class)
        rate_limits[action_class] = RateLimitRule(
            max_requests=int(rule_data.get("max_requests", base.max_requests if base else 60)),
            window_seconds=float(rule_data.get("window_seconds", base.window_seconds if base else 60)),
            message=rule_data.get("message", base.message if base else "Rate limit exceeded."),
        )

    known = {f.name for f in fields(ContentLimits)}
    overrides = {}
    for name, value in (data.get("content_limits") or {}).items():
        if name not in known:
            raise ValueError(f"Unknown content limit '{name}' in {path}")
        overrides[name] = None if value in (None, 0) else int(value)

    return rate_limits, ContentLimits(**overrides)


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
