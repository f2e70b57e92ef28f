"""Read-ahead wrapper for sniffing and size probes.

PeekableStream lets callers look at the first N bytes of a stream (magic
bytes, or "is this stream at least N bytes long?") without losing them:
later reads return the peeked bytes first, then continue with the source.
"""

from typing import BinaryIO


class PeekableStream:
    """Binary stream wrapper with monotonic lookahead.

    Peeked bytes accumulate in an append-only buffer. Asking for a longer
    lookahead than before only reads the missing delta from the source.
    """

    def __init__(self, source: BinaryIO):
        self._source = source
        self._source_read1 = getattr(source, 'read1', source.read)
        self._peeked = bytearray()
        self._exhausted = False

    def peek(self, size: int) -> bytes:
        """Return up to size bytes from the front of the stream without consuming them.

        Fewer bytes are returned only when the source ends first.
        """
        while len(self._peeked) < size and not self._exhausted:
            chunk = self._source.read(size - len(self._peeked))
            if not chunk:
                self._exhausted = True
                break
            self._peeked += chunk
        return bytes(self._peeked[:size])

    def reaches(self, threshold: int) -> bool:
        """Check whether the stream holds at least threshold bytes.

        Only buffers up to threshold bytes, so a huge stream is never read
        into memory just to answer the question.
        """
        if threshold <= 0:
            return True
        return len(self.peek(threshold)) >= threshold

    def _take_peeked(self, size: int) -> bytes:
        if size < 0 or size >= len(self._peeked):
            data = bytes(self._peeked)
            self._peeked.clear()
            return data
        data = bytes(self._peeked[:size])
        del self._peeked[:size]
        return data

    def read1(self, size: int = -1) -> bytes:
        """Return at most size bytes with at most one read from the source."""
        if self._peeked:
            return self._take_peeked(size)
        if self._exhausted:
            return b''
        chunk = self._source_read1(size)
        if not chunk:
            self._exhausted = True
        return chunk or b''

    def read(self, size: int = -1) -> bytes:
        """Read size bytes (or everything when size < 0), draining peeked bytes first."""
        data = self._take_peeked(size)
        if self._exhausted or (size >= 0 and len(data) >= size):
            return data

        if size < 0:
            rest = self._source.read()
            self._exhausted = True
            return data + (rest or b'')

        parts = [data]
        missing = size - len(data)
        while missing > 0:
            chunk = self._source.read(missing)
            if not chunk:
                self._exhausted = True
                break
            parts.append(chunk)
            missing -= len(chunk)
        return b''.join(parts)

    def readable(self) -> bool:
        return True
