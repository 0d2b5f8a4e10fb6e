import threading
import time
from dataclasses import dataclass

import pytest

from image_converter.batch import BatchCoordinator
from image_converter.errors import ConversionTimeoutError, NoItemsConvertedError, TransformError
from image_converter.models import Artifact, ItemFailure, ItemOutcome, ItemSuccess


@dataclass(frozen=True)
class Item:
    name: str
    delay: float = 0.0
    fail: bool = False


def echo(item: Item) -> Artifact:
    if item.delay:
        time.sleep(item.delay)
    if item.fail:
        raise TransformError(item.name, f"{item.name} is broken", "CORRUPT_INPUT")
    return Artifact(name=item.name, content=item.name.encode(), media_type="text/plain")


def test_outcomes_follow_input_order() -> None:
    items = [Item(f"item-{i}", delay=0.05 * (6 - i)) for i in range(6)]
    result = BatchCoordinator(3).run(items, echo)
    assert [outcome.name for outcome in result.outcomes] == [item.name for item in items]
    assert result.succeeded == 6


def test_partial_failure_is_recorded() -> None:
    items = [Item("a"), Item("b", fail=True), Item("c")]
    result = BatchCoordinator(2).run(items, echo)
    assert result.succeeded == 2
    assert result.failed == 1
    failure = result.outcomes[1]
    assert isinstance(failure, ItemFailure)
    assert failure.reason == "b is broken"
    assert failure.code == "CORRUPT_INPUT"


def test_all_failures_raise_with_result() -> None:
    items = [Item("a", fail=True), Item("b", fail=True)]
    with pytest.raises(NoItemsConvertedError) as excinfo:
        BatchCoordinator(2, empty_message="Nothing worked").run(items, echo)
    assert excinfo.value.status_code == 400
    assert str(excinfo.value) == "Nothing worked"
    assert excinfo.value.result.failed == 2


def test_empty_batch_returns_empty_result() -> None:
    result = BatchCoordinator(2).run([], echo)
    assert result.total == 0


def test_concurrency_is_bounded() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def tracked(item: Item) -> Artifact:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        try:
            time.sleep(0.02)
            return echo(item)
        finally:
            with lock:
                active -= 1

    items = [Item(str(i)) for i in range(12)]
    result = BatchCoordinator(3).run(items, tracked)
    assert result.succeeded == 12
    assert 1 <= peak <= 3


def test_next_chunk_waits_for_previous_chunk() -> None:
    finished: list[str] = []
    started: dict[str, list[str]] = {}
    lock = threading.Lock()

    def ordered(item: Item) -> Artifact:
        with lock:
            started[item.name] = list(finished)
        artifact = echo(item)
        with lock:
            finished.append(item.name)
        return artifact

    items = [Item("a", delay=0.05), Item("b"), Item("c"), Item("d")]
    BatchCoordinator(2).run(items, ordered)
    assert {"a", "b"} <= set(started["c"])
    assert {"a", "b"} <= set(started["d"])


def test_accumulate_runs_in_input_order_and_can_fail_items() -> None:
    seen: list[str] = []

    def accumulate(outcome: ItemOutcome) -> ItemOutcome:
        seen.append(outcome.name)
        if outcome.name == "c":
            return ItemFailure(name=outcome.name, reason="rejected", code="EMBED_FAILED")
        return outcome

    items = [Item("a", delay=0.03), Item("b"), Item("c"), Item("d", fail=True), Item("e")]
    result = BatchCoordinator(2).run(items, echo, accumulate=accumulate)
    assert seen == ["a", "b", "c", "d", "e"]
    assert [outcome.ok for outcome in result.outcomes] == [True, True, False, False, True]
    assert isinstance(result.outcomes[0], ItemSuccess)


def test_unexpected_errors_propagate() -> None:
    def explode(item: Item) -> Artifact:
        raise KeyError(item.name)

    with pytest.raises(KeyError):
        BatchCoordinator(2).run([Item("a")], explode)


def test_deadline_raises_timeout() -> None:
    items = [Item("slow", delay=0.5), Item("fast")]
    with pytest.raises(ConversionTimeoutError) as excinfo:
        BatchCoordinator(2, timeout_s=0.05).run(items, echo)
    assert excinfo.value.status_code == 504
    assert excinfo.value.code == "TIMEOUT"


def test_invalid_concurrency() -> None:
    with pytest.raises(ValueError):
        BatchCoordinator(0)
