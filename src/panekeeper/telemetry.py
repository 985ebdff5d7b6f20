"""Telemetry - 统一日志和指标入口

日志格式: [Component] msg
指标示例: capture.pruned, restore.leaf.ok/unavailable/failed, store.error
"""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module.

    Args:
        name: Module name (usually ``__name__``)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """为服务进程配置一次根日志"""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def format_leaf_log(component: str, label: str, msg: str) -> str:
    """Format a leaf-scoped message: [component:label[:24]] msg"""
    short = label[:24] if label else "unknown"
    return f"[{component}:{short}] {msg}"


class Metrics:
    """指标收集 facade

    内存中的简单 counter 和 gauge。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """Increment a counter.

        Args:
            name: Metric name (e.g. "restore.leaf.failed")
            labels: Optional labels (e.g. {"kind": "file"})
            value: Increment, default 1
        """
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """Set a gauge value."""
        key = self._make_key(name, labels)
        self._gauges[key] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Counter value (for tests)"""
        return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Gauge value (for tests)"""
        return self._gauges.get(self._make_key(name, labels), 0.0)

    def reset(self) -> None:
        """Reset all metrics (for tests)"""
        self._counters.clear()
        self._gauges.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


metrics = Metrics()
