"""Tests for change classification and debouncing."""

import asyncio
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from structlog.testing import capture_logs

from reloader.engine.aggregator import ChangeAggregator, ChangeKind
from reloader.engine.signals import Signal

DEBOUNCE = 0.05


@pytest.fixture
def aggregator() -> ChangeAggregator:
    return ChangeAggregator(
        changes=asyncio.Queue(),
        rebuild=Signal("rebuild"),
        restart=Signal("restart"),
        restart_extensions=("yml", ".yaml"),
        debounce_sec=DEBOUNCE,
    )


@pytest_asyncio.fixture
async def running(aggregator: ChangeAggregator) -> AsyncGenerator[ChangeAggregator, None]:
    """Aggregator consuming its queue in a background task."""
    task = asyncio.create_task(aggregator.run())
    yield aggregator
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


async def feed(aggregator: ChangeAggregator, *paths: str) -> None:
    for path in paths:
        await aggregator.changes.put(path)


class TestClassify:
    """Per-file classification tests."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/src/main.go", ChangeKind.BUILD),
            ("/src/config.yml", ChangeKind.RESTART),
            ("/src/config.yaml", ChangeKind.RESTART),
            ("/src/README.md", ChangeKind.IGNORE),
            ("/src/Makefile", ChangeKind.IGNORE),
        ],
    )
    def test_given_path_when_classified_then_expected_kind(
        self, aggregator: ChangeAggregator, path: str, expected: ChangeKind
    ) -> None:
        assert aggregator.classify(path) is expected

    def test_given_restart_all_when_classified_then_non_source_restarts(self) -> None:
        """Test mode treats every change as a reason to rerun."""
        aggregator = ChangeAggregator(
            changes=asyncio.Queue(),
            rebuild=Signal("reload"),
            restart=Signal("reload"),
            restart_all=True,
        )

        assert aggregator.classify("/src/testdata/input.json") is ChangeKind.RESTART
        assert aggregator.classify("/src/main.go") is ChangeKind.BUILD


class TestObserve:
    """Debounce state tests, driven without the run loop."""

    @pytest.mark.asyncio
    async def test_given_ignored_change_when_observed_then_nothing_pending(
        self, aggregator: ChangeAggregator
    ) -> None:
        with capture_logs() as logs:
            kind = aggregator.observe("/src/notes.txt")

        assert kind is ChangeKind.IGNORE
        assert not aggregator.pending
        assert aggregator.flush() is None
        assert logs[0]["event"] == "file_change_detected"
        assert logs[0]["action"] == "no action"

    @pytest.mark.asyncio
    async def test_given_restart_then_build_when_flushed_then_rebuild_wins(
        self, aggregator: ChangeAggregator
    ) -> None:
        """Order inside a burst does not matter."""
        aggregator.observe("/src/config.yml")
        aggregator.observe("/src/main.go")

        assert aggregator.flush() is ChangeKind.BUILD
        assert aggregator.rebuild.pending
        assert not aggregator.restart.pending

    @pytest.mark.asyncio
    async def test_given_flushed_burst_when_flushed_again_then_no_decision(
        self, aggregator: ChangeAggregator
    ) -> None:
        aggregator.observe("/src/config.yml")

        assert aggregator.flush() is ChangeKind.RESTART
        assert aggregator.flush() is None


class TestDebounce:
    """Debounced decisions with the run loop active."""

    @pytest.mark.asyncio
    async def test_given_burst_of_changes_when_quiet_then_single_rebuild(
        self, running: ChangeAggregator
    ) -> None:
        """Many events inside the window give exactly one decision."""
        # Given
        rebuilds = 0

        # When
        await feed(running, "/src/a.go", "/src/config.yml", "/src/b.go", "/src/c.go")
        await asyncio.sleep(DEBOUNCE * 4)
        if running.rebuild.take():
            rebuilds += 1

        # Then
        assert rebuilds == 1
        assert not running.restart.pending
        assert not running.pending

    @pytest.mark.asyncio
    async def test_given_restart_extension_only_when_quiet_then_restart_without_build(
        self, running: ChangeAggregator
    ) -> None:
        await feed(running, "/src/config.yml")
        await asyncio.sleep(DEBOUNCE * 4)

        assert running.restart.pending
        assert not running.rebuild.pending

    @pytest.mark.asyncio
    async def test_given_ignored_changes_when_quiet_then_no_decision(
        self, running: ChangeAggregator
    ) -> None:
        await feed(running, "/src/README.md", "/src/.DS_Store")
        await asyncio.sleep(DEBOUNCE * 4)

        assert not running.restart.pending
        assert not running.rebuild.pending

    @pytest.mark.asyncio
    async def test_given_second_change_when_inside_window_then_deadline_extended(self) -> None:
        """The quiet period restarts with every relevant change."""
        # Given
        debounce = 0.3
        aggregator = ChangeAggregator(
            changes=asyncio.Queue(),
            rebuild=Signal("rebuild"),
            restart=Signal("restart"),
            debounce_sec=debounce,
        )
        task = asyncio.create_task(aggregator.run())

        try:
            # When
            await aggregator.changes.put("/src/foo.go")
            await asyncio.sleep(0.2)
            await aggregator.changes.put("/src/bar.go")
            await asyncio.sleep(0.2)

            # Then: 0.4s after the first event, but only 0.2s after the second
            assert not aggregator.rebuild.pending

            await asyncio.sleep(0.3)
            assert aggregator.rebuild.take()
            assert not aggregator.rebuild.pending
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    @pytest.mark.asyncio
    async def test_given_receiver_busy_when_two_bursts_then_coalesced(
        self, running: ChangeAggregator
    ) -> None:
        """A decision made while one is still pending is dropped."""
        await feed(running, "/src/a.go")
        await asyncio.sleep(DEBOUNCE * 4)
        await feed(running, "/src/b.go")
        await asyncio.sleep(DEBOUNCE * 4)

        assert running.rebuild.take()
        assert not running.rebuild.pending
