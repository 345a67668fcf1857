"""
Per-request stream traces.

When ``STREAM_TRACE_ENABLED`` is set, every streaming exchange gets one
JSON-lines file under ``STREAM_TRACE_DIR`` holding the upstream ``data:``
payloads and the frames written to the client, in arrival order.
"""

import json
import time
from pathlib import Path
from typing import Optional

UPSTREAM = "upstream"
CLIENT = "client"
NOTE = "note"
ERROR = "error"


class StreamTracer:
    """Appends trace records for one request until closed or the byte cap is hit"""

    def __init__(self, request_id: str, route: str, base_dir: str, max_bytes: Optional[int] = None):
        directory = Path(base_dir)
        directory.mkdir(parents=True, exist_ok=True)
        started = time.strftime("%Y%m%dT%H%M%SZ", time.gmtime())

        self.request_id = request_id
        self.path = directory / f"{started}_{route.strip('/').replace('/', '_')}_{request_id}.jsonl"
        self._file = self.path.open("w", encoding="utf-8")
        self._budget = max_bytes if max_bytes and max_bytes > 0 else None
        self._written = 0
        self._capped = False

        self.log_note(f"trace started for {route}")

    def log_source_chunk(self, chunk: str) -> None:
        self._record(UPSTREAM, chunk)

    def log_converted_chunk(self, chunk: str) -> None:
        self._record(CLIENT, chunk)

    def log_note(self, note: str) -> None:
        self._record(NOTE, note)

    def log_error(self, message: str) -> None:
        self._record(ERROR, message)

    def close(self) -> None:
        if self._file.closed:
            return
        self._record(NOTE, "trace closed", force=True)
        self._file.close()

    def _record(self, kind: str, data: str, force: bool = False) -> None:
        if self._file.closed:
            return

        line = json.dumps({"t": round(time.time(), 3), "kind": kind, "data": data}) + "\n"
        size = len(line.encode("utf-8"))

        if self._budget is not None and not force and self._written + size > self._budget:
            # Keep the first frames, drop the rest
            if not self._capped:
                self._capped = True
                self._file.write(json.dumps({"t": round(time.time(), 3), "kind": NOTE, "data": "trace truncated"}) + "\n")
                self._file.flush()
            return

        self._file.write(line)
        self._file.flush()
        self._written += size


def maybe_create_stream_tracer(
    enabled: bool,
    request_id: str,
    route: str,
    base_dir: str,
    max_bytes: Optional[int],
) -> Optional[StreamTracer]:
    """Return a tracer for this request, or None when tracing is off"""
    if not enabled:
        return None
    return StreamTracer(request_id=request_id, route=route, base_dir=base_dir, max_bytes=max_bytes)
