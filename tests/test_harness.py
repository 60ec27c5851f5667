import pytest

from perkhub import models

import harness as harness_module
from harness import SEED_PERK, close_session, open_session, remove_test_user, seed_perk

pytestmark = pytest.mark.anyio


async def test_session_context_owns_seeded_perk(harness):
    assert harness.token
    assert harness.seeded_perk["title"] == SEED_PERK["title"]
    assert harness.created_perk_ids == {harness.seeded_perk["id"]}
    assert harness.user["email"] == harness.credentials["email"]


async def test_seed_retries_with_unique_title_on_conflict(harness):
    again = await seed_perk(harness.client)
    harness.created_perk_ids.add(again["id"])

    assert again["title"].startswith(SEED_PERK["title"] + " ")
    assert again["title"] != SEED_PERK["title"]


async def test_cleanup_is_best_effort(api_client, db_session):
    ctx = await open_session(api_client)
    extra = await ctx.create_perk({**SEED_PERK, "title": "Extra Perk"})
    # already gone before teardown, and an id that never existed
    await api_client.delete_perk(extra["id"])
    ctx.created_perk_ids.add(987654)

    results = await close_session(ctx)

    assert results[ctx.seeded_perk["id"]] is True
    assert results[extra["id"]] is False
    assert results[987654] is False
    assert db_session.query(models.Perk).count() == 0
    assert db_session.query(models.User).count() == 0


def test_remove_unknown_user_is_harmless():
    assert remove_test_user("nobody@example.com") is True
    assert remove_test_user("") is False


async def test_failed_seed_removes_registered_user(api_client, db_session, monkeypatch):
    async def broken_seed(client, base=SEED_PERK):
        raise RuntimeError("seed failed")

    monkeypatch.setattr(harness_module, "seed_perk", broken_seed)

    with pytest.raises(RuntimeError, match="seed failed"):
        await open_session(api_client)

    assert db_session.query(models.User).count() == 0
