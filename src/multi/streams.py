"""Copying child process output to the caller's streams."""

from __future__ import annotations

import codecs
import threading
from collections import deque
from typing import IO

CHUNK_SIZE = 8192
TAIL_CHUNKS = 4

# Held for each prefixed line so lines from concurrent jobs stay whole.
_line_lock = threading.Lock()


class _Sink:
    """Byte writer over a caller stream, binary if it exposes ``buffer``."""

    def __init__(self, dst: IO):
        self.dst = dst
        self.buffer = getattr(dst, "buffer", None)
        self.decoder = None
        if self.buffer is None:
            # one decoder per copy so characters split across reads survive
            self.decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def write(self, data: bytes, final: bool = False) -> None:
        if self.buffer is not None:
            if data:
                self.dst.flush()
                self.buffer.write(data)
                self.buffer.flush()
            return
        text = self.decoder.decode(data, final=final)
        if text:
            self.dst.write(text)
            self.dst.flush()

    def close(self) -> None:
        if self.decoder is not None:
            self.write(b"", final=True)


def tail_text(tail: deque | None, limit: int = 200) -> str:
    """Decode the bytes kept in *tail* and return the last *limit* characters."""
    if not tail:
        return ""
    return b"".join(tail).decode("utf-8", errors="replace").strip()[-limit:]


def copy_stream(src: IO[bytes], dst: IO, tail: deque | None = None) -> None:
    """Copy *src* to *dst* until EOF, chunk by chunk.

    If *tail* is given, the most recent chunks are also kept in it.
    """
    sink = _Sink(dst)
    read = getattr(src, "read1", src.read)
    with src:
        for chunk in iter(lambda: read(CHUNK_SIZE), b""):
            sink.write(chunk)
            if tail is not None:
                tail.append(chunk)
    sink.close()


def prefix_copy(host: str, src: IO[bytes], dst: IO, tail: deque | None = None) -> None:
    """Copy *src* to *dst* line by line, each line prefixed ``[host] ``.

    If *tail* is given, the most recent raw lines are also kept in it.
    """
    sink = _Sink(dst)
    prefix = ("[%s] " % host).encode()
    with src:
        for line in src:
            data = prefix + line.rstrip(b"\r\n") + b"\n"
            with _line_lock:
                sink.write(data)
            if tail is not None:
                tail.append(line)
    sink.close()


def new_tail() -> deque:
    """Bounded buffer for the last few chunks or lines of a stream."""
    return deque(maxlen=TAIL_CHUNKS)


def start_copier(target, *args) -> threading.Thread:
    """Run a copy function on a daemon thread and return it."""
    t = threading.Thread(target=target, args=args, daemon=True)
    t.start()
    return t
