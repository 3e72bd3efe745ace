"""Tests for the bounded map SDK loader."""

from __future__ import annotations

import pytest

from services.map_sdk import HeadlessMapSDK
from services.sdk_loader import load_map_sdk


class TestLoadMapSdk:
    @pytest.mark.asyncio
    async def test_returns_provided_sdk(self, sdk):
        assert await load_map_sdk(lambda: sdk, retries=3, interval=0) is sdk

    @pytest.mark.asyncio
    async def test_waits_for_sdk_to_appear(self, sdk):
        polls = []

        def probe():
            polls.append(1)
            return sdk if len(polls) >= 3 else None

        assert await load_map_sdk(probe, retries=5, interval=0) is sdk
        assert len(polls) == 3

    @pytest.mark.asyncio
    async def test_falls_back_to_direct_load(self):
        async def fallback():
            return HeadlessMapSDK()

        result = await load_map_sdk(lambda: None, fallback, retries=2, interval=0)
        assert isinstance(result, HeadlessMapSDK)

    @pytest.mark.asyncio
    async def test_failed_fallback_yields_none(self):
        async def fallback():
            raise RuntimeError("no api key")

        assert await load_map_sdk(lambda: None, fallback, retries=1, interval=0) is None

    @pytest.mark.asyncio
    async def test_no_fallback_yields_none(self):
        assert await load_map_sdk(lambda: None, retries=0, interval=0) is None
