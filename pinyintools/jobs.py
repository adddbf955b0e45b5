"""Pipeline jobs that rename a file and download a file."""

from __future__ import annotations

import os
import urllib.request
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import urlsplit

from .pipeline import MessageLevel, PipelineJob

PathLike = Union[str, "os.PathLike[str]"]
Opener = Callable[[urllib.request.Request], object]

_CHUNK_SIZE = 64 * 1024


class RenameFile(PipelineJob):
    """Move a file into place; on failure only a message is reported."""

    def __init__(self, source: PathLike, destination: PathLike) -> None:
        super().__init__()
        self.source = Path(source)
        self.destination = Path(destination)

    def start(self) -> None:
        try:
            os.rename(self.source, self.destination)
        except OSError:
            self._emit_message(MessageLevel.CRITICAL, "Converter crashed.")
            return
        self._emit_finished(True)

    def abort(self) -> None:
        """Renaming cannot be interrupted; nothing to do."""

    def clean_up(self) -> None:
        """The renamed file is the result; nothing to remove."""


def _content_length(response) -> int:
    headers = getattr(response, "headers", None)
    if headers is None:
        return -1
    value = headers.get("Content-Length")
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


class FileDownloader(PipelineJob):
    """Download ``url`` into ``destination``, reporting progress by tenths."""

    def __init__(
        self, url: str, destination: PathLike, opener: Optional[Opener] = None
    ) -> None:
        super().__init__()
        self.url = url
        self.destination = Path(destination)
        self._opener: Opener = opener if opener is not None else urllib.request.urlopen
        self._response = None
        self._aborted = False
        self._progress = 0

    def start(self) -> None:
        self._aborted = False
        self._progress = 0
        try:
            file = open(self.destination, "wb")
        except OSError:
            self._emit_message(MessageLevel.WARNING, "Create temporary file failed.")
            self._emit_finished(False)
            return
        self._emit_message(MessageLevel.INFORMATION, "Temporary file created.")

        parts = urlsplit(self.url)
        request = urllib.request.Request(
            self.url, headers={"Referer": f"{parts.scheme}://{parts.hostname or ''}"}
        )
        try:
            response = self._opener(request)
        except (OSError, ValueError):
            file.close()
            self._emit_message(MessageLevel.WARNING, "Failed to create request.")
            self._emit_finished(False)
            return
        self._response = response
        self._emit_message(MessageLevel.INFORMATION, "Download started.")

        total = _content_length(response)
        downloaded = 0
        try:
            with file:
                while not self._aborted:
                    chunk = response.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    file.write(chunk)
                    downloaded += len(chunk)
                    self.update_progress(downloaded, total)
        except OSError:
            self._emit_message(MessageLevel.WARNING, "Download failed.")
            self._emit_finished(False)
            return
        finally:
            response.close()
            self._response = None

        if self._aborted:
            return
        self._emit_message(MessageLevel.INFORMATION, "Download Finished")
        self._emit_finished(True)

    def abort(self) -> None:
        self._aborted = True
        if self._response is not None:
            self._response.close()
            self._response = None

    def clean_up(self) -> None:
        self.destination.unlink(missing_ok=True)

    def update_progress(self, downloaded: int, total: int) -> None:
        """Report the percentage once it has grown by at least ten points."""
        if total <= 0:
            return
        percent = min(int(downloaded / total * 100), 100)
        if percent >= self._progress + 10:
            self._emit_message(MessageLevel.INFORMATION, f"{percent}% Downloaded.")
            self._progress = percent