import threading

import pytest

from utils.performance_monitor import Metric, MetricsBuffer, PerformanceMonitor


class RecordingSink:
    def __init__(self, fail=False):
        self.fail = fail
        self.metrics = []

    def record(self, metric):
        if self.fail:
            raise ConnectionError("sink down")
        self.metrics.append(metric)


def test_metric_metadata_must_be_primitive():
    with pytest.raises(ValueError):
        Metric(operation="x", duration_ms=1.0, metadata={"bad": [1, 2]})


def test_metric_metadata_is_read_only():
    metric = Metric(operation="x", duration_ms=1.0, metadata={"count": 3})
    with pytest.raises(TypeError):
        metric.metadata["count"] = 4
    assert metric.to_dict()["metadata"] == {"count": 3}


def test_buffer_evicts_oldest():
    buffer = MetricsBuffer(max_size=2)
    for i in range(3):
        buffer.append(Metric(operation=f"op{i}", duration_ms=1.0))
    assert [m.operation for m in buffer.snapshot()] == ["op1", "op2"]
    assert len(buffer) == 2


def test_buffer_rejects_non_positive_size():
    with pytest.raises(ValueError):
        MetricsBuffer(max_size=0)


def test_timer_records_success_and_metadata(monitor):
    collected = []
    with monitor.timer("merge_results", collected) as meta:
        meta["results_count"] = 7

    assert len(collected) == 1
    metric = collected[0]
    assert metric.operation == "merge_results"
    assert metric.success
    assert metric.metadata["results_count"] == 7
    assert metric.duration_ms >= 0
    assert monitor.buffer.snapshot() == [metric]


def test_timer_success_flag_marks_degraded(monitor):
    with monitor.timer("search_brave") as meta:
        meta["success"] = False
    metric = monitor.buffer.snapshot()[0]
    assert not metric.success
    assert "success" not in metric.metadata


def test_timer_records_failure_and_reraises(monitor):
    with pytest.raises(KeyError):
        with monitor.timer("intent_detection"):
            raise KeyError("boom")
    assert not monitor.buffer.snapshot()[0].success


def test_stats(monitor):
    monitor.record("search_total", 100.0)
    monitor.record("search_total", 300.0, success=False)
    monitor.record("merge_results", 5.0)

    stats = monitor.stats("search_total")
    assert stats == {
        "average_time_ms": 200.0,
        "success_rate": 50.0,
        "total_operations": 2,
        "slowest_ms": 300.0,
        "fastest_ms": 100.0,
    }
    assert monitor.stats()["total_operations"] == 3
    assert sorted(monitor.stats_by_operation()) == ["merge_results", "search_total"]


def test_stats_when_empty(monitor):
    assert monitor.stats()["total_operations"] == 0
    assert monitor.stats("nothing")["average_time_ms"] == 0.0


def test_deliver_pushes_to_sink():
    sink = RecordingSink()
    monitor = PerformanceMonitor(MetricsBuffer(10), sink=sink)
    metric = monitor.record("search_total", 10.0)
    monitor.deliver([metric])
    assert sink.metrics == [metric]


def test_deliver_swallows_sink_failures():
    monitor = PerformanceMonitor(MetricsBuffer(10), sink=RecordingSink(fail=True))
    metric = monitor.record("search_total", 10.0)
    monitor.deliver([metric])


def test_deliver_without_sink_is_noop(monitor):
    monitor.deliver([Metric(operation="x", duration_ms=1.0)])


def test_monitors_share_an_injected_buffer():
    shared = MetricsBuffer(100)
    first = PerformanceMonitor(shared)
    second = PerformanceMonitor(shared)

    first.record("search_total", 1.0)
    second.record("merge_results", 2.0)

    assert first.buffer is shared
    assert second.buffer is shared
    assert len(shared) == 2
    assert shared.max_size == 100


def test_concurrent_appends_keep_newest_entries():
    threads_count, appends_per_thread, max_size = 8, 200, 500
    buffer = MetricsBuffer(max_size)

    def worker(thread_id):
        for i in range(appends_per_thread):
            buffer.append(Metric(operation=f"t{thread_id}", duration_ms=float(i)))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = buffer.snapshot()
    assert len(snapshot) == min(max_size, threads_count * appends_per_thread)
    # Per thread, surviving entries are that thread's most recent appends in order.
    for n in range(threads_count):
        durations = [m.duration_ms for m in snapshot if m.operation == f"t{n}"]
        assert durations == [float(i) for i in range(appends_per_thread - len(durations), appends_per_thread)]


def test_concurrent_appends_below_capacity_lose_nothing():
    buffer = MetricsBuffer(2000)

    def worker():
        for _ in range(250):
            buffer.append(Metric(operation="x", duration_ms=1.0))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(buffer) == 1000
