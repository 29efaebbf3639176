"""
raven.config — YAML Configuration Loader
=========================================

Reads ``config.yaml`` for the **non-secret** deployment settings: which
sources to poll, where their GraphQL endpoints live, the base URL used for
deep links, and which notification handlers each source feeds.

Secrets (webhook URLs, bearer tokens, ``DATABASE_URL``) never live here;
they come from the environment (``.env`` via python-dotenv).

Usage::

    from raven.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    for source in cfg.sources:
        print(source.name, source.handlers)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from raven.constants import DEFAULT_WEBHOOK_AVATAR_URL, DEFAULT_WEBHOOK_USERNAME, SOURCES

KNOWN_HANDLERS: frozenset[str] = frozenset({"discord", "farcaster"})


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Deployment settings for one governance source."""

    name: str
    graphql_url: str
    base_url: str
    handlers: tuple[str, ...] = ("discord",)
    farcaster_channel: str | None = None


@dataclass(frozen=True, slots=True)
class RavenConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    sources: tuple[SourceConfig, ...]

    # Outbound HTTP
    request_timeout: float = 30.0   # per fetch / per transmit
    dispatch_timeout: float = 30.0  # per (entity, handler) invocation

    # Scheduling: 0 means "run one cycle and exit"
    poll_interval: int = 0

    # Display
    ens_api_url: str | None = None
    webhook_username: str = DEFAULT_WEBHOOK_USERNAME
    webhook_avatar_url: str = DEFAULT_WEBHOOK_AVATAR_URL


def _parse_source(name: str, raw: dict) -> SourceConfig:
    if name not in SOURCES:
        raise ValueError(
            f"Unknown source {name!r}; expected one of {sorted(SOURCES)}"
        )

    handlers = tuple(raw.get("handlers") or ("discord",))
    unknown = set(handlers) - KNOWN_HANDLERS
    if unknown:
        raise ValueError(
            f"Unknown handler(s) {sorted(unknown)} for source {name!r}"
        )

    return SourceConfig(
        name=name,
        graphql_url=raw["graphql_url"],
        base_url=raw["base_url"],
        handlers=handlers,
        farcaster_channel=raw.get("farcaster_channel"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> RavenConfig:
    """Read *path* and return a :class:`RavenConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If a source or handler name is not recognised.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    sources = tuple(
        _parse_source(name, body or {}) for name, body in raw["sources"].items()
    )

    return RavenConfig(
        sources=sources,
        request_timeout=float(raw.get("request_timeout", 30)),
        dispatch_timeout=float(raw.get("dispatch_timeout", 30)),
        poll_interval=int(raw.get("poll_interval", 0)),
        ens_api_url=raw.get("ens_api_url") or None,
        webhook_username=raw.get("webhook_username", DEFAULT_WEBHOOK_USERNAME),
        webhook_avatar_url=raw.get("webhook_avatar_url", DEFAULT_WEBHOOK_AVATAR_URL),
    )
