from __future__ import annotations

"""Progress reporting protocol and the progress-observing file reader."""

from typing import BinaryIO, Callable, Optional, Protocol


class Reporter(Protocol):
    """Receives progress events while files are uploaded."""

    def on_progress(self, name: str, id: int) -> None: ...

    def on_download_start(self, name: str, size: Optional[int]) -> int: ...

    def on_download_progress(self, id: int, inc: int) -> None: ...

    def on_download_complete(self) -> None: ...


class NullReporter:
    """Reporter that ignores all events."""

    def on_progress(self, name: str, id: int) -> None:
        pass

    def on_download_start(self, name: str, size: Optional[int]) -> int:
        return 0

    def on_download_progress(self, id: int, inc: int) -> None:
        pass

    def on_download_complete(self) -> None:
        pass


class ProgressReader:
    """File wrapper that reports the size of every chunk read through it.

    Reads, ``tell()`` and ``fileno()`` are forwarded to the wrapped file, so
    consumers that size streams via ``fstat`` (like the multipart encoder)
    see the real file.
    """

    def __init__(self, fileobj: BinaryIO, callback: Callable[[int], None]):
        self._fileobj = fileobj
        self._callback = callback

    def read(self, size: int = -1) -> bytes:
        chunk = self._fileobj.read(size)
        if chunk:
            self._callback(len(chunk))
        return chunk

    def tell(self) -> int:
        return self._fileobj.tell()

    def fileno(self) -> int:
        return self._fileobj.fileno()

    def close(self) -> None:
        self._fileobj.close()
