from __future__ import annotations

import asyncio

import pytest

from helpers import BINARY, FakeZellij
from zellij_mcp.runner import ZellijRunner


@pytest.fixture
def fake_zellij(monkeypatch: pytest.MonkeyPatch) -> FakeZellij:
    fake = FakeZellij()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake)
    return fake


@pytest.fixture
def runner() -> ZellijRunner:
    return ZellijRunner(binary=BINARY, post_action_delay=0)
