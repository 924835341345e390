import asyncio

import pytest

from diagram_studio.services.render_coordinator import RenderCoordinator

from fakes import FakeRenderer

AB = "graph TD\nA-->B"
AC = "graph TD\nA-->C"


@pytest.mark.asyncio
async def test_late_response_for_superseded_text_is_discarded():
    renderer = FakeRenderer(delays={AB: 0.05})
    coordinator = RenderCoordinator(renderer)

    results = await asyncio.gather(coordinator.render_now(AB), coordinator.render_now(AC))

    assert results == [False, True]
    assert coordinator.svg == f"<svg><text>{AC}</text></svg>"
    assert coordinator.state.last_rendered_text == AC


@pytest.mark.asyncio
async def test_rapid_requests_render_once_with_final_text():
    renderer = FakeRenderer()
    coordinator = RenderCoordinator(renderer, debounce_seconds=0.05)

    for text in ["graph TD\nA", "graph TD\nA-", "graph TD\nA--", AB]:
        coordinator.request(text)
        await asyncio.sleep(0.002)
    await asyncio.sleep(0.15)
    await coordinator.drain()

    assert renderer.calls == [AB]
    assert coordinator.svg.endswith(f"{AB}</text></svg>")


@pytest.mark.asyncio
async def test_syntax_error_keeps_last_good_graphic():
    coordinator = RenderCoordinator(FakeRenderer())
    await coordinator.render_now(AB)
    good = coordinator.svg

    await coordinator.render_now("graph TD\nA--oops")

    assert coordinator.svg == good
    assert coordinator.error.startswith("Parse error on line 2")

    await coordinator.render_now(AC)
    assert coordinator.error is None
    assert coordinator.svg != good


@pytest.mark.asyncio
async def test_stale_error_does_not_replace_newer_graphic():
    renderer = FakeRenderer(delays={"graph TD\noops": 0.05})
    coordinator = RenderCoordinator(renderer)

    await asyncio.gather(coordinator.render_now("graph TD\noops"), coordinator.render_now(AB))

    assert coordinator.error is None
    assert AB in coordinator.svg


@pytest.mark.asyncio
async def test_unchanged_text_is_not_rerendered():
    renderer = FakeRenderer()
    coordinator = RenderCoordinator(renderer)
    await coordinator.render_now(AB)
    assert await coordinator.render_now(AB) is False
    assert renderer.calls == [AB]


@pytest.mark.asyncio
async def test_returning_to_rendered_text_suppresses_inflight_render():
    renderer = FakeRenderer(delays={AC: 0.05})
    coordinator = RenderCoordinator(renderer)
    await coordinator.render_now(AB)

    pending = asyncio.ensure_future(coordinator.render_now(AC))
    await asyncio.sleep(0.01)
    await coordinator.render_now(AB)
    await pending

    assert AB in coordinator.svg


@pytest.mark.asyncio
async def test_empty_text_clears_graphic_without_rendering():
    renderer = FakeRenderer()
    coordinator = RenderCoordinator(renderer)
    await coordinator.render_now(AB)

    await coordinator.render_now("   ")

    assert coordinator.svg is None
    assert renderer.calls == [AB]

    await coordinator.render_now(AB)
    assert AB in coordinator.svg


@pytest.mark.asyncio
async def test_results_after_close_are_ignored():
    renderer = FakeRenderer(delays={AB: 0.03})
    coordinator = RenderCoordinator(renderer)

    task = asyncio.ensure_future(coordinator.render_now(AB))
    await asyncio.sleep(0.005)
    coordinator.close()
    assert await task is False
    assert coordinator.svg is None

    coordinator.request(AC)
    assert not coordinator.pending


@pytest.mark.asyncio
async def test_skipped_render_still_tracks_document():
    renderer = FakeRenderer()
    coordinator = RenderCoordinator(renderer)
    await coordinator.render_now(AB, "doc-1")

    assert await coordinator.render_now(AB, "doc-2") is False

    assert renderer.calls == [AB]
    assert coordinator.state.document_id == "doc-2"
