import asyncio

import httpx
import pytest

from perkhub.client import PerksClient
from perkhub.directory import EMPTY_TEXT, DirectoryView

pytestmark = pytest.mark.anyio


def _page(titles, total=None):
    perks = [
        {"id": i + 1, "title": t, "merchant": "M", "category": "travel", "discountPercent": 10}
        for i, t in enumerate(titles)
    ]
    total = len(perks) if total is None else total
    return httpx.Response(
        200,
        json={"perks": perks, "count": len(perks), "total": total, "summary": f"Showing {len(perks)} of {total} perks"},
    )


async def test_mount_lists_seeded_perk_with_summary(harness):
    view = DirectoryView(harness.client)
    await view.mount()

    titles = [p["title"] for p in view.perks]
    assert harness.seeded_perk["title"] in titles
    assert view.summary.startswith("Showing")
    assert harness.seeded_perk["merchant"] in view.merchant_options
    assert harness.seeded_perk["title"] in view.render()


async def test_title_filter_round_trips(harness):
    view = DirectoryView(harness.client)
    await view.mount()
    await harness.create_perk(
        {"title": "Cinema Night", "description": "2 for 1", "category": "fun", "merchant": "Screens", "discountPercent": 50}
    )

    await view.change_title(harness.seeded_perk["title"])

    assert [p["title"] for p in view.perks] == [harness.seeded_perk["title"]]
    assert "Showing" in view.summary


async def test_merchant_filter_applies_on_submit(harness):
    view = DirectoryView(harness.client)
    await view.mount()

    view.change_merchant("NoSuchMerchant")
    # nothing is re-queried until the search button is pressed
    assert harness.seeded_perk["title"] in [p["title"] for p in view.perks]

    await view.submit()
    assert view.perks == []
    assert view.error is None
    assert EMPTY_TEXT in view.render()

    view.change_merchant(harness.seeded_perk["merchant"])
    await view.submit()
    assert harness.seeded_perk["title"] in [p["title"] for p in view.perks]
    assert view.summary.startswith("Showing")


async def test_superseded_response_is_dropped(anyio_backend):
    async def handler(request):
        if request.url.path.endswith("/merchants"):
            return httpx.Response(200, json={"merchants": []})
        if request.url.params.get("title") == "slow":
            await asyncio.sleep(0.2)
            return _page(["Stale result"])
        return _page(["Fresh result"])

    async with PerksClient(base_url="http://perks.test/api", transport=httpx.MockTransport(handler)) as client:
        view = DirectoryView(client)
        await asyncio.gather(view.change_title("slow"), view.change_title("fresh"))

    assert [p["title"] for p in view.perks] == ["Fresh result"]
    assert view.loading is False
    assert "Stale result" not in view.render()


async def test_error_keeps_last_results_and_is_not_empty_state(anyio_backend):
    calls = {"n": 0}

    def handler(request):
        if request.url.path.endswith("/merchants"):
            return httpx.Response(200, json={"merchants": ["M"]})
        calls["n"] += 1
        if calls["n"] == 1:
            return _page(["Kept result"])
        return httpx.Response(500, json={"message": "Internal server error"})

    async with PerksClient(base_url="http://perks.test/api", transport=httpx.MockTransport(handler)) as client:
        view = DirectoryView(client)
        await view.mount()
        await view.change_title("anything")

    assert view.error == "Internal server error"
    assert [p["title"] for p in view.perks] == ["Kept result"]
    screen = view.render()
    assert screen.startswith("Error: Internal server error")
    assert "Kept result" in screen
    assert EMPTY_TEXT not in screen


async def test_failure_before_first_load(anyio_backend):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    async with PerksClient(base_url="http://perks.test/api", transport=httpx.MockTransport(handler)) as client:
        view = DirectoryView(client)
        await view.mount()

    assert not view.loaded
    assert view.summary is None
    assert view.merchant_options == []
    assert view.render().startswith("Error: Could not reach the perks service")
