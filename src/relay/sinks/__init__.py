"""Sinks the consumer fans each message out to."""

from src.relay.sinks.store import HierarchicalStoreSink, create_store_sink
from src.relay.sinks.cache import LastSeenCacheSink, create_cache_sink
from src.relay.sinks.audit_log import AuditLogSink, create_audit_log_sink

__all__ = [
    "HierarchicalStoreSink",
    "create_store_sink",
    "LastSeenCacheSink",
    "create_cache_sink",
    "AuditLogSink",
    "create_audit_log_sink",
]
