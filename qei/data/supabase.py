"""HTTP client for the hosted PostgREST (Supabase) quarterback tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
import os
from typing import Any

import requests
import requests_cache

logger = logging.getLogger(__name__)

URL_ENV_VAR = "SUPABASE_URL"
KEY_ENV_VAR = "SUPABASE_ANON_KEY"
PASSING_STATS_TABLE = "qb_passing_stats"
DEFAULT_PAGE_SIZE = 1000
USER_AGENT = "qei-ranking-client/0.1"


class SupabaseConfigurationError(RuntimeError):
    """Raised when the Supabase URL or API key is not configured."""


class SupabaseClient:
    """Paged reads from the Supabase REST endpoint, authenticated with the anon key.

    Pass ``cache_name`` to keep responses in a :mod:`requests_cache` store.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float = 30.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        cache_name: str | None = None,
        cache_expire: int | None = 3600,
    ) -> None:
        url = url or os.environ.get(URL_ENV_VAR)
        api_key = api_key or os.environ.get(KEY_ENV_VAR)
        if not url or not api_key:
            raise SupabaseConfigurationError(
                f"Supabase connection requires {URL_ENV_VAR} and {KEY_ENV_VAR} (or explicit url/api_key)."
            )
        self.base_url = url.rstrip("/")
        self.timeout = timeout
        self.page_size = max(1, page_size)
        if cache_name:
            self.session: requests.Session = requests_cache.CachedSession(
                cache_name=cache_name, expire_after=cache_expire
            )
        else:
            self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            }
        )

    def table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table.strip('/')}"

    def fetch_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
        select: str = "*",
    ) -> list[dict[str, Any]]:
        """Return rows from ``table``, following pages until exhausted.

        Args:
            table: Table or view name.
            filters: PostgREST filters, e.g. ``{"gs": "gte.1"}``.
            order: PostgREST ordering, e.g. ``"season.desc"``.
            limit: Maximum number of rows; all rows when omitted.
            select: Column selection.
        """

        url = self.table_url(table)
        base_params: dict[str, Any] = {"select": select, **(filters or {})}
        if order:
            base_params["order"] = order

        rows: list[dict[str, Any]] = []
        while limit is None or len(rows) < limit:
            page_size = self.page_size if limit is None else min(self.page_size, limit - len(rows))
            params = {**base_params, "limit": page_size, "offset": len(rows)}
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError(f"Unexpected response from {table}: expected a JSON array")
            logger.debug("Fetched %d rows from %s (offset %d)", len(payload), table, params["offset"])
            rows.extend(payload)
            if len(payload) < page_size:
                break
        return rows

    def fetch_passing_stats(
        self,
        seasons: Iterable[int],
        *,
        min_games_started: int = 1,
        table: str = PASSING_STATS_TABLE,
    ) -> list[dict[str, Any]]:
        """Return quarterback passing rows for ``seasons``."""

        season_list = sorted({int(season) for season in seasons})
        filters = {"gs": f"gte.{int(min_games_started)}"}
        if season_list:
            filters["season"] = f"in.({','.join(str(season) for season in season_list)})"
        rows = self.fetch_rows(table, filters=filters, order="season.desc")
        logger.info("Fetched %d passing rows for seasons %s", len(rows), season_list)
        return rows

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "SupabaseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "KEY_ENV_VAR",
    "PASSING_STATS_TABLE",
    "SupabaseClient",
    "SupabaseConfigurationError",
    "URL_ENV_VAR",
]
