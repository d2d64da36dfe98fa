"""Tests for per-order regeneration serialization."""

import asyncio
import threading

import pytest

from tariff.domain.errors import ConcurrentEditConflict
from tariff.regeneration.coordinator import RegenerationCoordinator, RegenerationStatus


class _Gate:
    """A build function that blocks in its worker thread until released."""

    def __init__(self, value: str) -> None:
        self.value = value
        self.started = threading.Event()
        self.release = threading.Event()

    def __call__(self) -> str:
        self.started.set()
        self.release.wait(5)
        return self.value

    async def wait_started(self) -> None:
        await asyncio.to_thread(self.started.wait, 5)


@pytest.mark.anyio()
class TestSerialization:
    async def test_single_submission_commits(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []

        result = await coordinator.submit("TRF-1", lambda: "pdf", commits.append)

        assert result.committed
        assert result.status is RegenerationStatus.COMMITTED
        assert result.value == "pdf"
        assert result.ticket == 1
        assert commits == ["pdf"]
        assert coordinator.pending_count("TRF-1") == 0

    async def test_edit_during_build_supersedes_it(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []
        gate = _Gate("first")

        first = asyncio.create_task(coordinator.submit("TRF-1", gate, commits.append))
        await gate.wait_started()
        second = asyncio.create_task(coordinator.submit("TRF-1", lambda: "second", commits.append))
        await asyncio.sleep(0)
        assert coordinator.pending_count("TRF-1") == 2
        gate.release.set()

        first_result, second_result = await first, await second

        assert first_result.status is RegenerationStatus.SUPERSEDED
        assert first_result.value is None
        assert second_result.committed
        assert commits == ["second"]

    async def test_queued_stale_submission_never_builds(self) -> None:
        coordinator = RegenerationCoordinator(max_pending=5)
        commits: list[str] = []
        built: list[str] = []
        gate = _Gate("first")

        def build(value: str):
            def _build() -> str:
                built.append(value)
                return value
            return _build

        first = asyncio.create_task(coordinator.submit("TRF-1", gate, commits.append))
        await gate.wait_started()
        second = asyncio.create_task(coordinator.submit("TRF-1", build("second"), commits.append))
        third = asyncio.create_task(coordinator.submit("TRF-1", build("third"), commits.append))
        await asyncio.sleep(0)
        gate.release.set()

        results = await asyncio.gather(first, second, third)

        assert [r.status for r in results] == [
            RegenerationStatus.SUPERSEDED,
            RegenerationStatus.SUPERSEDED,
            RegenerationStatus.COMMITTED,
        ]
        assert built == ["third"]
        assert commits == ["third"]

    async def test_orders_do_not_contend(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []
        gate = _Gate("a")

        slow = asyncio.create_task(coordinator.submit("TRF-A", gate, commits.append))
        await gate.wait_started()

        other = await coordinator.submit("TRF-B", lambda: "b", commits.append)
        assert other.committed
        assert commits == ["b"]

        gate.release.set()
        assert (await slow).committed
        assert commits == ["b", "a"]


@pytest.mark.anyio()
class TestQueueLimit:
    async def test_full_queue_raises_conflict(self) -> None:
        coordinator = RegenerationCoordinator(max_pending=1, retry_after=7)
        gate = _Gate("first")

        running = asyncio.create_task(coordinator.submit("TRF-1", gate, lambda _: None))
        await gate.wait_started()

        with pytest.raises(ConcurrentEditConflict) as exc_info:
            await coordinator.submit("TRF-1", lambda: "second", lambda _: None)

        assert exc_info.value.order_id == "TRF-1"
        assert exc_info.value.pending == 1
        assert exc_info.value.retry_after == 7
        with pytest.raises(ConcurrentEditConflict):
            coordinator.check_capacity("TRF-1")

        gate.release.set()
        assert (await running).committed
        assert not coordinator.is_current("TRF-1", 1)
        coordinator.check_capacity("TRF-1")

    async def test_unknown_order_has_capacity(self) -> None:
        coordinator = RegenerationCoordinator(max_pending=1)
        coordinator.check_capacity("TRF-NEW")
        assert coordinator.pending_count("TRF-NEW") == 0
        assert not coordinator.is_current("TRF-NEW", 1)


@pytest.mark.anyio()
class TestFailures:
    async def test_build_failure_commits_nothing(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []

        def broken() -> str:
            raise RuntimeError("render failed")

        with pytest.raises(RuntimeError, match="render failed"):
            await coordinator.submit("TRF-1", broken, commits.append)

        assert commits == []
        assert coordinator.pending_count("TRF-1") == 0

    async def test_next_submission_runs_after_failure(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []

        def broken() -> str:
            raise RuntimeError("render failed")

        with pytest.raises(RuntimeError):
            await coordinator.submit("TRF-1", broken, commits.append)
        result = await coordinator.submit("TRF-1", lambda: "ok", commits.append)

        assert result.committed
        assert result.ticket == 2
        assert commits == ["ok"]


@pytest.mark.anyio()
class TestExclusiveActions:
    async def test_action_discards_running_build(self) -> None:
        coordinator = RegenerationCoordinator()
        commits: list[str] = []
        gate = _Gate("stale")

        build = asyncio.create_task(coordinator.submit("TRF-1", gate, commits.append))
        await gate.wait_started()

        def renew() -> str:
            commits.append("renewed")
            return "done"

        action = asyncio.create_task(coordinator.run_exclusive("TRF-1", renew))
        await asyncio.sleep(0)
        gate.release.set()

        build_result = await build
        assert await action == "done"
        assert build_result.status is RegenerationStatus.SUPERSEDED
        assert commits == ["renewed"]

    async def test_action_waits_for_lock(self) -> None:
        coordinator = RegenerationCoordinator()
        order: list[str] = []
        gate = _Gate("first")

        build = asyncio.create_task(coordinator.submit("TRF-1", gate, lambda _: None))
        await gate.wait_started()
        action = asyncio.create_task(coordinator.run_exclusive("TRF-1", lambda: order.append("action")))
        await asyncio.sleep(0)
        assert order == []

        gate.release.set()
        await build
        await action
        assert order == ["action"]

    async def test_ignores_queue_limit(self) -> None:
        coordinator = RegenerationCoordinator(max_pending=1)
        gate = _Gate("first")

        build = asyncio.create_task(coordinator.submit("TRF-1", gate, lambda _: None))
        await gate.wait_started()
        action = asyncio.create_task(coordinator.run_exclusive("TRF-1", lambda: "ran"))
        await asyncio.sleep(0)
        gate.release.set()

        await build
        assert await action == "ran"

    async def test_action_error_propagates_and_releases(self) -> None:
        coordinator = RegenerationCoordinator()

        def broken() -> None:
            raise RuntimeError("save failed")

        with pytest.raises(RuntimeError, match="save failed"):
            await coordinator.run_exclusive("TRF-1", broken)
        assert coordinator.pending_count("TRF-1") == 0
        assert (await coordinator.submit("TRF-1", lambda: "ok", lambda _: None)).committed


@pytest.mark.anyio()
class TestCommitDecline:
    async def test_declined_commit_reports_superseded(self) -> None:
        coordinator = RegenerationCoordinator()

        result = await coordinator.submit("TRF-1", lambda: "pdf", lambda _: False)

        assert result.status is RegenerationStatus.SUPERSEDED
        assert result.value is None


@pytest.mark.anyio()
class TestSlotCleanup:
    async def test_finished_orders_leave_no_slot(self) -> None:
        coordinator = RegenerationCoordinator()

        for index in range(20):
            await coordinator.submit(f"TRF-{index}", lambda: "pdf", lambda _: None)
        await coordinator.run_exclusive("TRF-X", lambda: None)

        assert coordinator._slots == {}

    async def test_slot_removed_after_queued_submissions_finish(self) -> None:
        coordinator = RegenerationCoordinator()
        gate = _Gate("first")

        first = asyncio.create_task(coordinator.submit("TRF-1", gate, lambda _: None))
        await gate.wait_started()
        second = asyncio.create_task(coordinator.submit("TRF-1", lambda: "second", lambda _: None))
        await asyncio.sleep(0)
        gate.release.set()

        await first
        assert (await second).committed
        assert "TRF-1" not in coordinator._slots

    async def test_tickets_keep_increasing_after_cleanup(self) -> None:
        coordinator = RegenerationCoordinator()

        first = await coordinator.submit("TRF-1", lambda: "a", lambda _: None)
        second = await coordinator.submit("TRF-1", lambda: "b", lambda _: None)

        assert second.ticket > first.ticket


def test_max_pending_must_be_positive() -> None:
    with pytest.raises(ValueError, match="max_pending"):
        RegenerationCoordinator(max_pending=0)
