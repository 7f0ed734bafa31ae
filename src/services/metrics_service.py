"""
Metrics Service - Server-side performance monitoring

Features:
- Connection, vote, round and error counters
- Handler response time tracking with a moving average
- Periodic process memory sampling with a high-memory warning
- Health status and performance report for the HTTP endpoints
"""

import time
import threading
import logging
import psutil
from typing import Dict, List, Any, Optional, Union
from collections import defaultdict, deque
from dataclasses import dataclass, field
from contextlib import contextmanager

from src.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


@dataclass
class MetricPoint:
    """Single metric data point."""
    name: str
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """Collects and stores metric points in bounded per-name series."""

    def __init__(self, max_points: int = 1000):
        self.max_points = max_points
        self.metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_points))
        self.lock = threading.RLock()

    def record(self, name: str, value: Union[int, float], tags: Dict[str, str] = None):
        """Record a metric point."""
        point = MetricPoint(name, value, time.time(), tags or {})

        with self.lock:
            self.metrics[name].append(point)

    def get_recent(self, name: str, seconds: int = 60) -> List[MetricPoint]:
        """Get metric points recorded within the last ``seconds``."""
        cutoff_time = time.time() - seconds

        with self.lock:
            if name not in self.metrics:
                return []

            return [point for point in self.metrics[name] if point.timestamp >= cutoff_time]

    def get_latest(self, name: str) -> Optional[MetricPoint]:
        with self.lock:
            series = self.metrics.get(name)
            return series[-1] if series else None

    def get_average(self, name: str, seconds: int = 60) -> Optional[float]:
        """Get average value for a metric over time period."""
        points = self.get_recent(name, seconds)

        if not points:
            return None

        return sum(point.value for point in points) / len(points)

    def clear_old_metrics(self, max_age_seconds: int = 3600):
        """Clear metrics older than specified age."""
        cutoff_time = time.time() - max_age_seconds

        with self.lock:
            for name in self.metrics:
                while self.metrics[name] and self.metrics[name][0].timestamp < cutoff_time:
                    self.metrics[name].popleft()


class SystemMonitor:
    """Samples process memory through psutil."""

    def __init__(self, collector: MetricsCollector, high_memory_mb: int = 500):
        self.collector = collector
        self.high_memory_mb = high_memory_mb
        self.process = psutil.Process()

    def collect_memory_metrics(self) -> Optional[Dict[str, float]]:
        """
        Record one memory sample.

        Returns:
            The sample in megabytes, or None if psutil could not read it
        """
        try:
            process_memory = self.process.memory_info()
            system_memory = psutil.virtual_memory()
        except Exception as e:
            logger.error(f'Error collecting memory metrics: {e}')
            return None

        self.collector.record('process.memory.rss_bytes', process_memory.rss)
        self.collector.record('process.memory.vms_bytes', process_memory.vms)
        self.collector.record('system.memory.usage_percent', system_memory.percent)

        sample = {
            'rssMB': round(process_memory.rss / BYTES_PER_MB),
            'vmsMB': round(process_memory.vms / BYTES_PER_MB),
            'systemPercent': system_memory.percent
        }

        if process_memory.rss / BYTES_PER_MB > self.high_memory_mb:
            logger.warning(f"High memory usage detected: {sample['rssMB']} MB resident")

        return sample


class MetricsService:
    """Main metrics service."""

    def __init__(self, app_config=None):
        """
        Args:
            app_config: AppConfig supplying the sampling interval, memory
                threshold and slow-operation threshold; defaults when None
        """
        self.collection_interval = getattr(app_config, 'metrics_interval_seconds', 30)
        self.slow_operation_ms = getattr(app_config, 'slow_operation_ms', 100)
        high_memory_mb = getattr(app_config, 'high_memory_mb', 500)

        self.collector = MetricsCollector()
        self.system_monitor = SystemMonitor(self.collector, high_memory_mb)

        self.lock = threading.Lock()
        self.counters = {
            'socketConnections': 0,
            'activeConnections': 0,
            'totalVotes': 0,
            'totalGames': 0,
            'errorCount': 0
        }
        self.average_response_time_ms = 0.0
        self.memory_samples: deque = deque(maxlen=100)
        self.start_time = time.time()

        self.collection_thread = None
        self.shutdown_event = threading.Event()

        logger.info('MetricsService initialized')

    # Counters

    def record_connection(self):
        with self.lock:
            self.counters['socketConnections'] += 1
            self.counters['activeConnections'] += 1

    def record_disconnection(self):
        with self.lock:
            self.counters['activeConnections'] = max(0, self.counters['activeConnections'] - 1)

    def record_vote(self):
        with self.lock:
            self.counters['totalVotes'] += 1

    def record_game(self):
        """Count a completed round (a reveal)."""
        with self.lock:
            self.counters['totalGames'] += 1

    def record_error(self):
        with self.lock:
            self.counters['errorCount'] += 1

    # Timing

    def record_response_time(self, operation: str, duration_ms: float):
        """
        Fold one handler duration into the moving average.

        The first sample seeds the average; later samples weigh 10%.
        """
        with self.lock:
            if self.average_response_time_ms == 0:
                self.average_response_time_ms = duration_ms
            else:
                self.average_response_time_ms = self.average_response_time_ms * 0.9 + duration_ms * 0.1

        self.collector.record('handler.duration_ms', duration_ms, {'operation': operation})

        if duration_ms > self.slow_operation_ms:
            logger.warning(f'Slow operation {operation}: {duration_ms:.1f} ms')

    @contextmanager
    def time_operation(self, operation: str):
        """Time a block and record its duration, even if it raises."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.record_response_time(operation, (time.perf_counter() - start_time) * 1000)

    # Memory sampling

    def collect_memory_sample(self) -> Optional[Dict[str, float]]:
        sample = self.system_monitor.collect_memory_metrics()
        if sample is not None:
            self.memory_samples.append(dict(sample, timestamp=utc_timestamp()))
        return sample

    def start_collection(self):
        """Start background memory sampling."""
        if self.collection_thread and self.collection_thread.is_alive():
            return

        self.shutdown_event.clear()

        def collection_worker():
            while not self.shutdown_event.wait(self.collection_interval):
                try:
                    self.collect_memory_sample()
                    self.collector.clear_old_metrics()
                except Exception as e:
                    logger.error(f'Error in metrics collection: {e}')

        self.collection_thread = threading.Thread(target=collection_worker, name='MetricsCollection')
        self.collection_thread.daemon = True
        self.collection_thread.start()

        logger.info(f'Metrics collection started every {self.collection_interval}s')

    def stop_collection(self):
        """Stop background memory sampling."""
        self.shutdown_event.set()

        if self.collection_thread and self.collection_thread.is_alive():
            self.collection_thread.join(timeout=5)

        logger.info('Metrics collection stopped')

    # Reporting

    def get_health_status(self) -> Dict[str, Any]:
        """Uptime, counters and current memory."""
        with self.lock:
            counters = dict(self.counters)
            counters['averageResponseTime'] = self.average_response_time_ms

        latest_rss = self.collector.get_latest('process.memory.rss_bytes')
        latest_vms = self.collector.get_latest('process.memory.vms_bytes')

        return {
            'status': 'healthy',
            'uptime': round(time.time() - self.start_time, 3),
            'metrics': counters,
            'memory': {
                'rssMB': round(latest_rss.value / BYTES_PER_MB) if latest_rss else None,
                'vmsMB': round(latest_vms.value / BYTES_PER_MB) if latest_vms else None,
                'samples': len(self.memory_samples)
            },
            'timestamp': utc_timestamp()
        }

    def generate_report(self) -> Dict[str, Any]:
        """Health status plus derived rates."""
        report = self.get_health_status()
        metrics = report['metrics']

        connections = metrics['socketConnections']
        games = metrics['totalGames']

        report['averageResponseTimeMs'] = round(metrics['averageResponseTime'], 2)
        report['errorRate'] = f"{metrics['errorCount'] / connections * 100:.2f}%" if connections else '0%'
        report['votesPerGame'] = round(metrics['totalVotes'] / games) if games else 0

        logger.info(f"Performance report generated: {metrics['totalGames']} games, {report['errorRate']} errors")
        return report

    def shutdown(self):
        """Shutdown the metrics service."""
        logger.info('Shutting down MetricsService...')

        self.stop_collection()

        with self.collector.lock:
            self.collector.metrics.clear()

        logger.info('MetricsService shutdown complete')


# Global instance - will be set by app.py
_metrics_instance: Optional[MetricsService] = None


def set_metrics_service(service: Optional[MetricsService]):
    """Set the global metrics service instance."""
    global _metrics_instance
    _metrics_instance = service


def get_metrics_service() -> Optional[MetricsService]:
    return _metrics_instance
