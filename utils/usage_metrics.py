"""Prometheus counters for token usage and request volume, served at /metrics."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest

METRIC_PREFIX = "chat_gateway"


def _totals(counter: Counter) -> List[Any]:
    # Counters also expose a *_created sample per label set
    return [sample for family in counter.collect() for sample in family.samples if sample.name.endswith("_total")]


class UsageMetrics:
    """Per-model token counters and per-(model, endpoint) request counters on a private registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._register()

    def _register(self) -> None:
        self.tokens_in = Counter(
            f"{METRIC_PREFIX}_tokens_in",
            "Total number of input tokens processed per model",
            ["model"],
            registry=self.registry,
        )
        self.tokens_out = Counter(
            f"{METRIC_PREFIX}_tokens_out",
            "Total number of output tokens generated per model",
            ["model"],
            registry=self.registry,
        )
        self.requests = Counter(
            f"{METRIC_PREFIX}_requests",
            "Total number of requests per model and endpoint",
            ["model", "endpoint"],
            registry=self.registry,
        )

    def record_token_usage(self, model: str, tokens_in: int, tokens_out: int) -> None:
        self.tokens_in.labels(model=model).inc(max(tokens_in, 0))
        self.tokens_out.labels(model=model).inc(max(tokens_out, 0))

    def record_request(self, model: str, endpoint: str) -> None:
        self.requests.labels(model=model, endpoint=endpoint).inc()

    def reset(self) -> None:
        for counter in (self.tokens_in, self.tokens_out, self.requests):
            self.registry.unregister(counter)
        self._register()

    def render(self) -> bytes:
        """Prometheus text exposition of every counter"""
        return generate_latest(self.registry)

    def snapshot(self) -> Dict[str, Any]:
        """Current counter values as plain dictionaries"""
        tokens_in = {s.labels["model"]: int(s.value) for s in _totals(self.tokens_in)}
        tokens_out = {s.labels["model"]: int(s.value) for s in _totals(self.tokens_out)}
        requests = sorted(
            (s.labels["model"], s.labels["endpoint"], int(s.value)) for s in _totals(self.requests)
        )
        return {
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "requests": [
                {"model": model, "endpoint": endpoint, "count": count} for model, endpoint, count in requests
            ],
        }


USAGE_METRICS = UsageMetrics()
