"""List of installed pinyin dictionaries and whether each is enabled.

A dictionary ``name.dict`` is disabled by a marker file ``name.dict.disable``
next to it in any of the searched directories.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

_DICT_SUFFIX = ".dict"
_DISABLE_SUFFIX = ".disable"


@dataclass
class DictionaryFile:
    """A dictionary file name with its enabled state."""

    name: str
    enabled: bool

    @property
    def display_name(self) -> str:
        """The file name without its ``.dict`` suffix."""
        if self.name.endswith(_DICT_SUFFIX):
            return self.name[: -len(_DICT_SUFFIX)]
        return self.name


def _files_with_suffix(directory: Path, suffix: str) -> Iterator[str]:
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return
    for entry in entries:
        if entry.name.endswith(suffix) and entry.is_file():
            yield entry.name


class DictionaryFileList:
    """Dictionaries found in a user directory and further system directories."""

    def __init__(
        self,
        user_directory: PathLike,
        system_directories: Iterable[PathLike] = (),
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.user_directory = Path(user_directory)
        self.system_directories = [Path(d) for d in system_directories]
        self.on_changed = on_changed
        self._files: list[DictionaryFile] = []
        self.load()

    @property
    def files(self) -> list[DictionaryFile]:
        """A copy of the current rows."""
        return [DictionaryFile(f.name, f.enabled) for f in self._files]

    def __len__(self) -> int:
        return len(self._files)

    def __getitem__(self, row: int) -> DictionaryFile:
        return self._files[row]

    def __iter__(self) -> Iterator[DictionaryFile]:
        return iter(self.files)

    def _directories(self) -> list[Path]:
        return [self.user_directory, *self.system_directories]

    def load(self) -> None:
        """Scan the directories again."""
        enabled: dict[str, bool] = {}
        for directory in self._directories():
            for name in _files_with_suffix(directory, _DICT_SUFFIX):
                enabled[name] = True
        for directory in self._directories():
            for name in _files_with_suffix(directory, _DICT_SUFFIX + _DISABLE_SUFFIX):
                dict_name = name[: -len(_DISABLE_SUFFIX)]
                if dict_name in enabled:
                    enabled[dict_name] = False
        self._files = [
            DictionaryFile(name, enabled[name])
            for name in sorted(enabled, key=lambda n: n.encode("utf-8"))
        ]

    def find_file(self, name: str) -> int:
        """Row of the file called ``name``, or 0 if there is none."""
        for row, file in enumerate(self._files):
            if file.name == name:
                return row
        return 0

    def set_enabled(self, row: int, enabled: bool) -> bool:
        """Change a row's state; returns whether anything changed."""
        if row < 0 or row >= len(self._files):
            return False
        file = self._files[row]
        if file.enabled == bool(enabled):
            return False
        file.enabled = bool(enabled)
        if self.on_changed is not None:
            self.on_changed()
        return True

    def save(self) -> None:
        """Create or remove disable markers in the user directory."""
        for file in self._files:
            marker = self.user_directory / (file.name + _DISABLE_SUFFIX)
            if file.enabled:
                marker.unlink(missing_ok=True)
            else:
                try:
                    self.user_directory.mkdir(parents=True, exist_ok=True)
                except OSError:
                    continue
                marker.touch()