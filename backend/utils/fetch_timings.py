"""In-process recorder for directions fetch durations."""

import time
import threading
from collections import deque
from typing import Deque, Dict, Any, List, Optional

# oldest records are dropped once the buffer is full
MAX_RECORDS = 1000

_lock = threading.Lock()
_records: Deque[Dict[str, Any]] = deque(maxlen=MAX_RECORDS)


def record_fetch_timing(provider: str, duration: float, edge_id: Optional[str] = None, ok: bool = True):
    with _lock:
        _records.append({
            "provider": provider,
            "edge_id": edge_id,
            "duration": duration,
            "ok": ok,
            "timestamp": time.time(),
        })


def get_and_reset() -> List[Dict[str, Any]]:
    """Return all timing records and clear the buffer."""
    with _lock:
        data = list(_records)
        _records.clear()
        return data


def timed_call(provider: str, edge_id: Optional[str], func, *args, **kwargs):
    """Run func and record how long it took, failed calls included."""
    start = time.time()
    ok = False
    try:
        result = func(*args, **kwargs)
        ok = True
        return result
    finally:
        record_fetch_timing(provider=provider, duration=time.time() - start, edge_id=edge_id, ok=ok)
