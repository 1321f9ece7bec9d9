"""Wire encoders for metrics and logs."""

from cmexporter.core.encoding.ndjson import encode_logs
from cmexporter.core.encoding.prometheus import encode_metrics

__all__ = ["encode_logs", "encode_metrics"]
