from .run_log import RunLog
from .trace_emitter import TraceEmitter
from .trace_store import TraceStore

__all__ = ["RunLog", "TraceEmitter", "TraceStore"]
