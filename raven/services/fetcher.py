"""
raven.services.fetcher — GraphQL entity sources
=================================================

One POST per (source, kind) against the source's GraphQL endpoint, parsed
into the kind's entity model.

Return contract of :meth:`GraphQLSource.fetch`:

- a list (possibly empty) — the upstream's full current collection;
- ``None`` — the upstream reported *no data*, which the cycle treats as
  "skip this kind", never as "everything disappeared";
- :class:`~raven.errors.FetchError` — timeout, transport failure, HTTP error
  status, GraphQL errors without data, or rows that fail validation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from raven.constants import SourceProfile
from raven.engine.entities import Entity, EntityKind, parse_entities
from raven.errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KindQuery:
    """The GraphQL document for one entity kind and where its list lives in ``data``."""

    query: str
    path: tuple[str, ...]
    variables: dict[str, Any] = field(default_factory=dict)


def extract_path(node: Any, path: Sequence[str]) -> Any:
    """Walk *path* through a decoded GraphQL ``data`` object.

    A list met before the end of the path is flattened: the remaining path
    is applied to every element and the results concatenated, so
    ``("ideas", "votes")`` yields every vote of every idea.
    """
    for i, segment in enumerate(path):
        if node is None:
            return None
        if isinstance(node, list):
            flattened: list[Any] = []
            for item in node:
                sub = extract_path(item, path[i:])
                if sub is None:
                    continue
                if isinstance(sub, list):
                    flattened.extend(sub)
                else:
                    flattened.append(sub)
            return flattened
        if not isinstance(node, dict):
            raise FetchError(f"Unexpected {type(node).__name__} at {'.'.join(path[:i])!r}")
        node = node.get(segment)
    return node


async def post_graphql(
    client: httpx.AsyncClient,
    url: str,
    query: str,
    variables: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """Execute one GraphQL request and return its ``data`` object (may be ``None``)."""
    try:
        response = await client.post(
            url, json={"query": query, "variables": variables or {}}
        )
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise FetchError(
            "Request timeout - Please check your network connection and try again"
        ) from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Failed to execute GraphQL request: {exc}") from exc

    try:
        body = response.json()
    except ValueError as exc:
        raise FetchError(f"Malformed GraphQL response: {exc}") from exc
    if not isinstance(body, dict):
        raise FetchError("Malformed GraphQL response: body is not an object")

    data = body.get("data")
    errors = body.get("errors")
    if errors:
        messages = "; ".join(str(e.get("message", e)) for e in errors if isinstance(e, dict))
        if data is None:
            raise FetchError(f"GraphQL errors: {messages or errors}")
        logger.warning("GraphQL returned partial data with errors: %s", messages)
    return data


class GraphQLSource:
    """Entity source for one governance platform backed by a GraphQL endpoint."""

    def __init__(
        self,
        profile: SourceProfile,
        url: str,
        queries: dict[EntityKind, KindQuery],
        client: httpx.AsyncClient,
    ) -> None:
        self.profile = profile
        self.url = url
        self._queries = queries
        self._client = client

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def kinds(self) -> tuple[EntityKind, ...]:
        return tuple(k for k in self.profile.kinds if k in self._queries)

    async def fetch(self, kind: EntityKind) -> list[Entity] | None:
        kind_query = self._queries.get(kind)
        if kind_query is None:
            raise FetchError(f"{self.name} has no query for {kind.value}", source=self.name, kind=kind.value)

        try:
            data = await post_graphql(self._client, self.url, kind_query.query, kind_query.variables)
            if data is None:
                return None
            rows = extract_path(data, kind_query.path)
        except FetchError as exc:
            exc.source, exc.kind = self.name, kind.value
            raise

        if rows is None:
            return None
        if not isinstance(rows, list):
            raise FetchError(
                f"Expected a list at {'.'.join(kind_query.path)!r}, got {type(rows).__name__}",
                source=self.name, kind=kind.value,
            )

        try:
            entities = parse_entities(kind, rows)
        except ValidationError as exc:
            raise FetchError(
                f"Response does not match the {kind.value} schema: {exc}",
                source=self.name, kind=kind.value,
            ) from exc

        logger.info("Fetched %d %s from %s", len(entities), kind.value, self.name)
        return entities
