"""
raven.services.registry — Wiring sources and handlers from config
===================================================================

Turns a :class:`~raven.config.RavenConfig` plus the environment's secrets
into ready-to-run :class:`~raven.engine.cycle.Orchestrator` objects.

Secrets are looked up per source:

- ``<SOURCE>_DISCORD_WEBHOOK_URL`` for the Discord handler
- ``<SOURCE>_WARPCAST_TOKEN`` for the Farcaster handler

A handler whose secret is missing is skipped with a warning rather than
failing the whole deployment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import httpx

from raven.config import RavenConfig, SourceConfig
from raven.constants import SOURCES
from raven.engine.cache import NoveltyCache
from raven.engine.cycle import Orchestrator
from raven.services.discord_handler import DiscordHandler
from raven.services.farcaster_handler import FarcasterHandler
from raven.services.fetcher import GraphQLSource
from raven.services.handler import NotificationHandler
from raven.services.queries import QUERIES
from raven.services.wallet import AddressResolver

logger = logging.getLogger(__name__)


def discord_secret_name(source: str) -> str:
    return f"{source.upper()}_DISCORD_WEBHOOK_URL"


def farcaster_secret_name(source: str) -> str:
    return f"{source.upper()}_WARPCAST_TOKEN"


def build_handlers(
    cfg: RavenConfig,
    source_cfg: SourceConfig,
    client: httpx.AsyncClient,
    resolver: AddressResolver,
    env: Mapping[str, str] | None = None,
) -> list[NotificationHandler]:
    """Instantiate the handlers configured for *source_cfg* that have their secrets."""
    env = os.environ if env is None else env
    profile = SOURCES[source_cfg.name]
    handlers: list[NotificationHandler] = []

    for handler_name in source_cfg.handlers:
        if handler_name == "discord":
            webhook_url = env.get(discord_secret_name(source_cfg.name))
            if not webhook_url:
                logger.warning(
                    "%s is not set; Discord notifications disabled for %s",
                    discord_secret_name(source_cfg.name), source_cfg.name,
                )
                continue
            handlers.append(DiscordHandler(
                profile, source_cfg.base_url, webhook_url, client, resolver,
                username=cfg.webhook_username,
                avatar_url=cfg.webhook_avatar_url,
            ))
        elif handler_name == "farcaster":
            token = env.get(farcaster_secret_name(source_cfg.name))
            if not token:
                logger.warning(
                    "%s is not set; Farcaster notifications disabled for %s",
                    farcaster_secret_name(source_cfg.name), source_cfg.name,
                )
                continue
            handlers.append(FarcasterHandler(
                profile, source_cfg.base_url, token, client, resolver,
                channel=source_cfg.farcaster_channel,
            ))

    return handlers


def build_orchestrators(
    cfg: RavenConfig,
    cache: NoveltyCache,
    client: httpx.AsyncClient,
    env: Mapping[str, str] | None = None,
) -> list[Orchestrator]:
    """One orchestrator per configured source, sharing *cache* and *client*."""
    resolver = AddressResolver(client, cfg.ens_api_url)
    orchestrators: list[Orchestrator] = []

    for source_cfg in cfg.sources:
        profile = SOURCES[source_cfg.name]
        source = GraphQLSource(profile, source_cfg.graphql_url, QUERIES[source_cfg.name], client)
        handlers = build_handlers(cfg, source_cfg, client, resolver, env)
        if not handlers:
            logger.warning(
                "No handlers registered for %s; new entities will only be cached",
                source_cfg.name,
            )
        orchestrators.append(Orchestrator(
            source, cache, handlers, dispatch_timeout=cfg.dispatch_timeout,
        ))
        logger.info(
            "Registered source %s with handlers: %s",
            source_cfg.name, ", ".join(h.name for h in handlers) or "none",
        )

    return orchestrators
