from pageindex_sdk.observability import names
from pageindex_sdk.observability.base import NoOpMetricsHook


class TestNoOpMetricsHook:
    def test_accepts_every_metric_call(self) -> None:
        hook = NoOpMetricsHook()

        assert hook.record_latency(names.API_REQUEST_DURATION, 12.5) is None
        assert hook.increment(names.API_REQUESTS_TOTAL, labels={"operation": "x"}) is None
        assert hook.record_gauge(names.TREE_NODES_INDEXED, 3) is None
