"""Unit tests for MetricsCollector."""

import pytest
from perf_monitor.core.config import Settings
from perf_monitor.domain.models import MemoryUsage, NetworkInfo
from perf_monitor.runtime.observer import PerformanceRuntime
from perf_monitor.services.collector import MetricsCollector
from prometheus_client import REGISTRY
from shared.constants import EntryTypes

from tests.helpers.entries import (
    first_input,
    layout_shift,
    lcp,
    navigation,
    paint,
    resource,
)


def _navigate(runtime, count, start=0):
    for i in range(count):
        runtime.dispatch([navigation(load=1000 + start + i)])


def _dropped(entry_type):
    value = REGISTRY.get_sample_value(
        "perf_monitor_patches_dropped_total", {"entry_type": entry_type}
    )
    return value or 0.0


class TestComponentMetrics:
    def test_first_report_creates_metric(self, collector):
        collector.record_component_metric("MealPlanner", 12.0)

        metric = collector.get_component_metric("MealPlanner")
        assert metric.render_time_ms == 12.0
        assert metric.rerender_count == 1
        assert metric.memory_leaks == 0

    def test_pairwise_running_average(self, collector):
        timings = [10.0, 20.0, 40.0, 8.0]
        for t in timings:
            collector.record_component_metric("BudgetTable", t)

        expected = timings[0]
        for t in timings[1:]:
            expected = (expected + t) / 2

        metric = collector.get_component_metric("BudgetTable")
        assert metric.render_time_ms == pytest.approx(expected)
        assert metric.rerender_count == len(timings)

    def test_true_mean_averaging(self, runtime):
        collector = MetricsCollector(
            runtime, config=Settings(render_time_averaging="mean")
        )
        for t in [10.0, 20.0, 40.0, 10.0]:
            collector.record_component_metric("ChoreList", t)

        assert collector.get_component_metric("ChoreList").render_time_ms == 20.0

    def test_components_tracked_independently(self, collector):
        collector.record_component_metric("A", 5.0)
        collector.record_component_metric("B", 50.0)

        report = collector.get_performance_report()
        names = [c.component_name for c in report.components]
        assert names == ["A", "B"]

    def test_tracking_survives_stop_and_start(self, collector):
        collector.start_monitoring()
        collector.record_component_metric("Calendar", 10.0)
        collector.stop_monitoring()
        collector.start_monitoring()
        collector.record_component_metric("Calendar", 30.0)

        metric = collector.get_component_metric("Calendar")
        assert metric.render_time_ms == 20.0
        assert metric.rerender_count == 2

    def test_recording_while_stopped(self, collector):
        collector.record_component_metric("Calendar", 10.0)
        assert not collector.is_monitoring
        assert collector.get_component_metric("Calendar").rerender_count == 1


class TestBuffering:
    def test_sample_appended_to_live_buffer(self, collector, runtime):
        runtime.dispatch([navigation(load=1500.0, dcl=700.0, fetch_start=100.0)])

        (sample,) = collector.live_samples
        assert sample.page_load_ms == 1500.0
        assert sample.dom_content_loaded_ms == 700.0
        assert sample.first_contentful_paint_ms == 0
        assert sample.largest_contentful_paint_ms == 0
        assert collector.history == []

    def test_flush_on_every_tenth_sample(self, collector, runtime):
        _navigate(runtime, 9)
        assert len(collector.live_samples) == 9
        assert collector.history == []

        _navigate(runtime, 1, start=9)
        assert collector.live_samples == []
        assert [s.page_load_ms for s in collector.history] == [
            1000 + i for i in range(10)
        ]

        _navigate(runtime, 10, start=10)
        assert collector.live_samples == []
        assert [s.page_load_ms for s in collector.history] == [
            1000 + i for i in range(20)
        ]

    def test_sample_ids_monotonic(self, collector, runtime):
        _navigate(runtime, 3)
        ids = [s.sample_id for s in collector.live_samples]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_history_trimmed_to_recent_half(self, collector, runtime):
        _navigate(runtime, 1000)
        assert len(collector.history) == 1000

        _navigate(runtime, 10, start=1000)
        history = collector.history
        assert len(history) == 500
        assert history[-1].page_load_ms == 1000 + 1009
        assert history[0].page_load_ms == 1000 + 510

    def test_history_never_exceeds_capacity(self, collector, runtime):
        for batch in range(130):
            _navigate(runtime, 10, start=batch * 10)
            assert len(collector.history) <= 1000

    def test_history_capacity_of_one(self, runtime):
        collector = MetricsCollector(
            runtime, config=Settings(history_capacity=1, flush_every=1)
        )
        for i in range(5):
            _navigate(runtime, 1, start=i)
            assert len(collector.history) <= 1

    def test_live_buffer_drops_oldest_past_capacity(self, runtime):
        config = Settings(live_buffer_capacity=3, flush_every=0)
        collector = MetricsCollector(runtime, config=config)
        _navigate(runtime, 5)

        assert [s.page_load_ms for s in collector.live_samples] == [
            1002,
            1003,
            1004,
        ]

    def test_report_forces_flush(self, collector, runtime):
        _navigate(runtime, 3)
        report = collector.get_performance_report()

        assert collector.live_samples == []
        assert len(collector.history) == 3
        assert report.current.page_load_ms == 1002


class TestReport:
    def test_empty_report(self, collector):
        report = collector.get_performance_report()

        assert report.current is None
        assert report.averages == {}
        assert report.recommendations == []
        assert report.components == []
        assert report.database.status == "active"
        assert report.api == {"size": 0, "entries": []}
        assert report.assets == {
            "preloaded_resources": 0,
            "loaded_fonts": 0,
            "cached_images": 0,
        }

    def test_averages_over_history(self, collector, runtime):
        runtime.dispatch([navigation(load=1000.0, dcl=400.0)])
        runtime.dispatch([navigation(load=3000.0, dcl=600.0)])

        averages = collector.get_performance_report().averages
        assert averages["page_load_ms"] == 2000.0
        assert averages["dom_content_loaded_ms"] == 500.0
        assert averages["cumulative_layout_shift"] == 0.0
        assert set(averages) == {
            "page_load_ms",
            "dom_content_loaded_ms",
            "first_contentful_paint_ms",
            "largest_contentful_paint_ms",
            "cumulative_layout_shift",
            "first_input_delay_ms",
        }

    def test_recommendations_from_current_sample(self, collector, runtime):
        runtime.dispatch([navigation(load=4200.0)])

        report = collector.get_performance_report()
        assert report.recommendations == [
            "Page load time is high. Consider code splitting and lazy loading."
        ]

    def test_cache_stats_passthrough(self, runtime, config):
        class Stats:
            def get_cache_stats(self):
                return {"size": 7, "entries": []}

        collector = MetricsCollector(
            runtime, config=config, api_cache=Stats(), asset_cache=Stats()
        )
        report = collector.get_performance_report()
        assert report.api == {"size": 7, "entries": []}
        assert report.assets == {"size": 7, "entries": []}

    def test_assets_from_observed_resources(self, collector, runtime):
        runtime.dispatch(
            [
                resource(initiator="img", name="https://cdn.dayboard.app/hero.jpg"),
                resource(initiator="css", name="https://cdn.dayboard.app/inter.woff2"),
                resource(),
            ]
        )

        assert collector.get_performance_report().assets == {
            "preloaded_resources": 0,
            "loaded_fonts": 1,
            "cached_images": 1,
        }

    def test_report_is_a_snapshot(self, collector, runtime):
        runtime.dispatch([navigation(navigation_id="nav-1")])
        report = collector.get_performance_report()
        runtime.dispatch([layout_shift(0.3, navigation_id="nav-1")])

        assert report.current.cumulative_layout_shift == 0.0
        assert collector.history[0].cumulative_layout_shift == pytest.approx(0.3)

    def test_export(self, collector, runtime):
        _navigate(runtime, 4)
        collector.record_component_metric("Feedback", 3.0)
        collector.measure_execution("parse", lambda: 1)

        exported = collector.export_metrics()
        assert len(exported.page_metrics) == 4
        assert exported.component_metrics[0].component_name == "Feedback"
        assert exported.executions["parse"]["count"] == 1
        assert exported.exported_at.endswith("+00:00")
        assert collector.live_samples == []


class TestWebVitals:
    def test_fcp_patches_latest_sample(self, collector, runtime):
        runtime.dispatch([navigation(), paint(320.0)])
        assert collector.live_samples[-1].first_contentful_paint_ms == 320.0

    def test_other_paint_entries_ignored(self, collector, runtime):
        runtime.dispatch([navigation(), paint(100.0, name="first-paint")])
        assert collector.live_samples[-1].first_contentful_paint_ms == 0

    def test_patch_dropped_when_buffer_empty(self, collector, runtime):
        runtime.dispatch([paint(320.0), lcp(900.0), first_input(10.0, 20.0)])
        assert collector.live_samples == []

    def test_lcp_uses_last_entry_of_batch(self, collector, runtime):
        runtime.dispatch([navigation()])
        runtime.dispatch([lcp(900.0), lcp(1400.0), lcp(1800.0)])
        assert collector.live_samples[-1].largest_contentful_paint_ms == 1800.0

    def test_fid_set_once_per_sample(self, collector, runtime):
        runtime.dispatch([navigation()])
        runtime.dispatch([first_input(100.0, 130.0), first_input(500.0, 700.0)])

        assert collector.live_samples[-1].first_input_delay_ms == 30.0

    def test_cls_excludes_recent_input(self, collector, runtime):
        runtime.dispatch([navigation()])
        runtime.dispatch(
            [
                layout_shift(0.05),
                layout_shift(0.4, had_recent_input=True),
                layout_shift(0.02),
                layout_shift(0.9, had_recent_input=True),
                layout_shift(0.01),
            ]
        )
        assert collector.live_samples[-1].cumulative_layout_shift == pytest.approx(
            0.08
        )

    def test_cls_resets_per_navigation(self, collector, runtime):
        runtime.dispatch([navigation(), layout_shift(0.2)])
        runtime.dispatch([navigation(), layout_shift(0.05)])

        first, second = collector.live_samples
        assert first.cumulative_layout_shift == pytest.approx(0.2)
        assert second.cumulative_layout_shift == pytest.approx(0.05)

    def test_cls_session_scope(self, runtime):
        collector = MetricsCollector(runtime, config=Settings(cls_scope="session"))
        runtime.dispatch([navigation(), layout_shift(0.2)])
        runtime.dispatch([navigation(), layout_shift(0.05)])

        first, second = collector.live_samples
        assert first.cumulative_layout_shift == pytest.approx(0.2)
        assert second.cumulative_layout_shift == pytest.approx(0.25)

    def test_correlated_patch_targets_originating_navigation(
        self, collector, runtime
    ):
        runtime.dispatch([navigation(navigation_id="nav-1")])
        runtime.dispatch([navigation(navigation_id="nav-2")])
        runtime.dispatch(
            [
                lcp(2600.0, navigation_id="nav-1"),
                first_input(10.0, 60.0, navigation_id="nav-1"),
                layout_shift(0.3, navigation_id="nav-1"),
            ]
        )

        first, second = collector.live_samples
        assert first.largest_contentful_paint_ms == 2600.0
        assert first.first_input_delay_ms == 50.0
        assert first.cumulative_layout_shift == pytest.approx(0.3)
        assert second.largest_contentful_paint_ms == 0
        assert second.first_input_delay_ms == 0
        assert second.cumulative_layout_shift == 0

    def test_correlated_patch_reaches_flushed_sample(self, collector, runtime):
        runtime.dispatch([navigation(navigation_id="nav-0")])
        _navigate(runtime, 9)
        assert collector.live_samples == []

        runtime.dispatch([lcp(3100.0, navigation_id="nav-0")])
        assert collector.history[0].largest_contentful_paint_ms == 3100.0

    def test_unknown_navigation_id_dropped(self, collector, runtime):
        runtime.dispatch([navigation()])
        runtime.dispatch([lcp(3100.0, navigation_id="never-seen")])
        assert collector.live_samples[-1].largest_contentful_paint_ms == 0

    def test_patch_for_trimmed_sample_dropped(self, runtime):
        collector = MetricsCollector(
            runtime, config=Settings(history_capacity=4, flush_every=1)
        )
        runtime.dispatch([navigation(navigation_id="old")])
        _navigate(runtime, 4)
        assert all(s.navigation_id != "old" for s in collector.history)

        before = _dropped(EntryTypes.LARGEST_CONTENTFUL_PAINT)
        runtime.dispatch([lcp(2600.0, navigation_id="old")])

        assert _dropped(EntryTypes.LARGEST_CONTENTFUL_PAINT) == before + 1
        assert all(s.largest_contentful_paint_ms == 0 for s in collector.history)

    def test_correlation_map_evicts_oldest(self, runtime):
        collector = MetricsCollector(runtime, config=Settings(correlation_capacity=2))
        for navigation_id in ("nav-1", "nav-2", "nav-3"):
            runtime.dispatch([navigation(navigation_id=navigation_id)])

        before = _dropped(EntryTypes.LARGEST_CONTENTFUL_PAINT)
        runtime.dispatch([lcp(2600.0, navigation_id="nav-1")])
        runtime.dispatch([lcp(2700.0, navigation_id="nav-3")])

        first, _, third = collector.live_samples
        assert first.largest_contentful_paint_ms == 0
        assert third.largest_contentful_paint_ms == 2700.0
        assert _dropped(EntryTypes.LARGEST_CONTENTFUL_PAINT) == before + 1

    def test_capability_snapshots(self, collector, runtime):
        runtime.dispatch([navigation()])
        runtime.update_capabilities(
            memory=MemoryUsage(used=10, total=20, limit=100),
            connection=NetworkInfo(effective_type="4g", downlink=10.0, rtt=50),
        )
        runtime.dispatch([navigation()])

        without, with_caps = collector.live_samples
        assert without.memory_usage is None
        assert without.network_info is None
        assert with_caps.memory_usage.limit == 100
        assert with_caps.network_info.effective_type == "4g"


class TestSlowResources:
    def test_threshold_is_strict(self, collector, runtime, mock_logger):
        runtime.dispatch([resource(start=0.0, response_end=1000.0)])
        mock_logger.warning.assert_not_called()

        runtime.dispatch([resource(start=0.0, response_end=1001.0)])
        mock_logger.warning.assert_called_once()

    def test_log_payload(self, collector, runtime, mock_logger):
        runtime.dispatch(
            [resource(start=200.0, response_end=1700.5, transfer_size=None)]
        )

        args, kwargs = mock_logger.warning.call_args
        assert args[0] == "Slow resource detected"
        assert kwargs["extra"] == {
            "component": "PerformanceMonitor",
            "resource": "https://cdn.dayboard.app/app.js",
            "duration": "1500.50",
            "size": 0,
            "type": "script",
        }

    def test_resource_not_part_of_samples(self, collector, runtime):
        runtime.dispatch([resource(response_end=5000.0)])
        assert collector.live_samples == []


class TestMonitoringLifecycle:
    def test_start_is_idempotent(self, collector, mock_logger):
        collector.start_monitoring()
        collector.start_monitoring()

        assert collector.is_monitoring
        assert mock_logger.info.call_count == 1
        assert mock_logger.info.call_args[0][0] == "Performance monitoring started"

    def test_stop_without_start_is_noop(self, collector, runtime, mock_logger):
        collector.stop_monitoring()

        mock_logger.info.assert_not_called()
        assert runtime.observer_count == 4

    def test_stop_releases_observers(self, collector, runtime, mock_logger):
        collector.start_monitoring()
        collector.stop_monitoring()

        assert not collector.is_monitoring
        assert runtime.observer_count == 0
        assert mock_logger.info.call_args[0][0] == "Performance monitoring stopped"

        runtime.dispatch([navigation()])
        assert collector.live_samples == []

    def test_restart_resubscribes(self, collector, runtime):
        collector.start_monitoring()
        collector.stop_monitoring()
        collector.start_monitoring()

        assert runtime.observer_count == 4
        runtime.dispatch([navigation()])
        assert len(collector.live_samples) == 1


class TestCapabilityGating:
    def test_without_runtime(self, config):
        collector = MetricsCollector(None, config=config)
        collector.start_monitoring()
        collector.record_component_metric("Lists", 4.0)

        report = collector.get_performance_report()
        assert collector.active_observers == 0
        assert report.current is None
        assert report.components[0].render_time_ms == 4.0

    def test_umbrella_failure_logged(self, config, mock_logger):
        runtime = PerformanceRuntime(EntryTypes.web_vital_types())
        collector = MetricsCollector(runtime, config=config)

        mock_logger.warning.assert_called_once()
        args, kwargs = mock_logger.warning.call_args
        assert args[0] == "Performance Observer initialization failed"
        assert "navigation" in kwargs["extra"]["error"]
        assert collector.active_observers == 3

    def test_umbrella_subscribes_to_supported_subset(self, config, mock_logger):
        supported = [t for t in EntryTypes.all_types() if t != EntryTypes.MEASURE]
        runtime = PerformanceRuntime(supported)
        collector = MetricsCollector(runtime, config=config)

        runtime.dispatch([navigation()])

        mock_logger.warning.assert_not_called()
        assert collector.active_observers == 4
        assert len(collector.live_samples) == 1

    def test_unsupported_web_vitals_skipped_quietly(self, config, mock_logger):
        runtime = PerformanceRuntime(EntryTypes.timeline_types())
        collector = MetricsCollector(runtime, config=config)

        mock_logger.warning.assert_not_called()
        assert collector.active_observers == 1
        runtime.dispatch([navigation(), lcp(5000.0)])
        assert collector.live_samples[-1].largest_contentful_paint_ms == 0


class TestExecutionTimings:
    def test_measure_execution_passes_result(self, collector):
        assert collector.measure_execution("sum", lambda: 1 + 1) == 2
        assert collector.get_execution_stats()["sum"]["count"] == 1

    @pytest.mark.asyncio
    async def test_measure_async_execution(self, collector):
        async def load():
            return "ok"

        assert await collector.measure_async_execution("load", load) == "ok"
        assert collector.get_execution_stats()["load"]["count"] == 1
