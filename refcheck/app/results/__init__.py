from .sink import ResultSink
from .memory_stream import MemoryQueueResultStream

__all__ = [
    "ResultSink",
    "MemoryQueueResultStream",
]
