"""Tests for the Supabase REST client."""

from __future__ import annotations

import os
import types
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import requests_cache

from qei.data.supabase import USER_AGENT, SupabaseClient, SupabaseConfigurationError


class _StubResponse(types.SimpleNamespace):
    def raise_for_status(self) -> None:
        return None

    def json(self):
        return self.payload


class _StubSession:
    def __init__(self, pages):
        self.pages = list(pages)
        self.calls = []

    def get(self, url, timeout=None, **kwargs):
        self.calls.append({"url": url, "timeout": timeout, **kwargs})
        return _StubResponse(payload=self.pages.pop(0))

    def close(self):
        pass


class SupabaseClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = SupabaseClient(url="https://example.supabase.co/", api_key="anon-key", page_size=2)

    def test_headers_carry_api_key(self) -> None:
        headers = self.client.session.headers
        self.assertEqual(headers["apikey"], "anon-key")
        self.assertEqual(headers["Authorization"], "Bearer anon-key")
        self.assertEqual(headers["User-Agent"], USER_AGENT)
        self.assertNotIn("http", headers["User-Agent"])

    def test_table_url(self) -> None:
        self.assertEqual(
            self.client.table_url("qb_passing_stats"),
            "https://example.supabase.co/rest/v1/qb_passing_stats",
        )

    def test_cache_name_enables_cached_session(self) -> None:
        with TemporaryDirectory() as tmp:
            client = SupabaseClient(url="https://example.supabase.co", api_key="k", cache_name=str(Path(tmp) / "qei"))
            try:
                self.assertIsInstance(client.session, requests_cache.CachedSession)
            finally:
                client.close()
        self.assertNotIsInstance(self.client.session, requests_cache.CachedSession)

    def test_fetch_rows_follows_pages(self) -> None:
        stub = _StubSession([[{"id": 1}, {"id": 2}], [{"id": 3}]])
        self.client.session = stub
        rows = self.client.fetch_rows("qb_passing_stats")
        self.assertEqual([row["id"] for row in rows], [1, 2, 3])
        self.assertEqual([call["params"]["offset"] for call in stub.calls], [0, 2])

    def test_fetch_rows_respects_limit(self) -> None:
        stub = _StubSession([[{"id": 1}, {"id": 2}], [{"id": 3}]])
        self.client.session = stub
        rows = self.client.fetch_rows("qb_passing_stats", limit=3)
        self.assertEqual(len(rows), 3)
        self.assertEqual(stub.calls[1]["params"]["limit"], 1)

    def test_fetch_passing_stats_filters(self) -> None:
        stub = _StubSession([[]])
        self.client.session = stub
        self.client.fetch_passing_stats([2024, 2023, 2024])
        params = stub.calls[0]["params"]
        self.assertEqual(params["gs"], "gte.1")
        self.assertEqual(params["season"], "in.(2023,2024)")
        self.assertEqual(params["order"], "season.desc")

    def test_unexpected_payload_raises(self) -> None:
        self.client.session = _StubSession([{"message": "nope"}])
        with self.assertRaises(ValueError):
            self.client.fetch_rows("qb_passing_stats")

    def test_missing_configuration_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(SupabaseConfigurationError):
                SupabaseClient()

    def test_environment_configuration(self) -> None:
        env = {"SUPABASE_URL": "https://env.supabase.co", "SUPABASE_ANON_KEY": "env-key"}
        with patch.dict(os.environ, env, clear=True):
            with SupabaseClient() as client:
                self.assertEqual(client.base_url, "https://env.supabase.co")


if __name__ == "__main__":
    unittest.main()
