"""Editable table of custom phrases backed by the custom phrase file."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from .customphrase import CustomPhraseDict

CUSTOM_PHRASE_FILE_NAME = "pinyin/customphrase"

_MULTILINE_COMMENT = """The line should be in format key,order=value
If value is multiline, you may either write is as
key,order=
line1
line2
...
lineN
Or, write it as key,order="line1\\nline2...\\nlineN"
The comment line is started with # or ;.
"""

_USAGE_COMMENT = """If you want to produce dynamic content, you may set the phrase to
start with symbol "#". The phrase may contain variable name like
$name or ${name}. For example, you can write: sj,2=#$fullhour:$minute
to produce current 24-hour time with sj.
Built-in functions include:
$year Current year, e.g. 1990, 2003.
$year_yy Current year in two-digit, e.g. 90, 03.
$month Current month, e.g. 1, 2, 3..., 12.
$month_mm Current month in two digit, e.g. 01, 02, ... 12.
$day Current day of month, e.g. 1, 2, 3..., 31.
$day_dd Current day of month in two digit, e.g. 01, 02, ... 31.
$weekday Current weekday, e.g. 1, 2, 3, ... 7.
$fullhour Current 24-hour, e.g. 00, 01, 02, ..., 23.
$halfhour Current 12-hour, 01, 02, 03, ..., 12.
$ampm Current AM or PM.
$minute Current minute, e.g. 00, 01, ..., 59
$second Current second, e.g. 00, 01, ..., 59
$year_cn Current year in Chinese, e.g. 一九九零, 二零零三.
$year_yy_cn Current year in two digit Chinese, e.g. 九零, 零三.
$month_cn Current month in Chinese, e.g. 一月, 二月, ... 十二月.
$day_cn Current day in Chinese, e.g. 一, 二, ... 三十一.
$fullhour_cn Current 24-hour in Chinese, e.g. 零, 一, 二, ... 二十三.
$halfhour_cn Current 12-hour in Chinese, e.g. 一, 二, ... 十二.
$ampm_cn Current AM, PM in Chinese, 上午 or 下午.
$minute_cn Current minute in Chinese, 零, 一, 二, ... 五十九.
$second_cn Current second in Chinese, 零, 一, 二, ... 五十九.

If lua is installed, the function defined in imeapi can be invoked 
with ${lua:function_name}.
"""

PathLike = Union[str, "os.PathLike[str]"]


def custom_phrase_help_message() -> str:
    """Usage text describing dynamic phrases and built-in variables."""
    return _USAGE_COMMENT


class Column(IntEnum):
    """Columns of the phrase table."""

    ENABLE = 0
    KEY = 1
    PHRASE = 2
    ORDER = 3


_HEADERS = {Column.KEY: "Key", Column.PHRASE: "Phrase", Column.ORDER: "Order"}


@dataclass
class CustomPhraseItem:
    """One row of the table; ``order`` is kept positive, ``enabled`` separate."""

    key: str
    value: str
    order: int
    enabled: bool


def _default_path() -> Path:
    base = os.environ.get("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"), ".local", "share"
    )
    return Path(base) / "fcitx5" / CUSTOM_PHRASE_FILE_NAME


def parse_custom_phrase_file(path: PathLike) -> list[CustomPhraseItem]:
    """Read every phrase, disabled ones included; a missing file gives []."""
    try:
        with open(path, encoding="utf-8") as stream:
            phrase_dict = CustomPhraseDict()
            phrase_dict.load(stream, load_disabled=True)
    except FileNotFoundError:
        return []
    return [
        CustomPhraseItem(
            key=key,
            value=phrase.value,
            order=abs(phrase.order),
            enabled=phrase.order >= 0,
        )
        for key, phrases in phrase_dict.items()
        for phrase in phrases
    ]


def _write_comment(stream, text: str) -> None:
    for line in text.split("\n"):
        stream.write(f"# {line}\n")


def save_custom_phrase_file(path: PathLike, items: list[CustomPhraseItem]) -> None:
    """Write ``items`` with the explanatory header, replacing the file atomically."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    phrase_dict = CustomPhraseDict()
    for item in items:
        phrase_dict.add_phrase(
            item.key, item.value, item.order * (1 if item.enabled else -1)
        )

    fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name + ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as stream:
            _write_comment(stream, _MULTILINE_COMMENT)
            _write_comment(stream, custom_phrase_help_message())
            stream.write("\n")
            phrase_dict.save(stream)
        os.replace(temp_name, target)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise


class CustomPhraseModel:
    """Rows of custom phrases with a flag telling whether they need saving."""

    def __init__(
        self,
        path: Optional[PathLike] = None,
        on_need_save_changed: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self.path = Path(path) if path is not None else _default_path()
        self.on_need_save_changed = on_need_save_changed
        self._items: list[CustomPhraseItem] = []
        self._need_save = False

    @property
    def need_save(self) -> bool:
        """Whether the rows differ from what was last loaded or saved."""
        return self._need_save

    def _set_need_save(self, need_save: bool) -> None:
        if self._need_save != need_save:
            self._need_save = need_save
            if self.on_need_save_changed is not None:
                self.on_need_save_changed(need_save)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CustomPhraseItem]:
        return iter(list(self._items))

    def load(self) -> None:
        """Replace the rows with the contents of the phrase file."""
        self._set_need_save(False)
        self._items = parse_custom_phrase_file(self.path)

    def save(self) -> None:
        """Write the rows to the phrase file."""
        save_custom_phrase_file(self.path, list(self._items))
        self._set_need_save(False)

    def add_item(self, key: str, value: str, order: int, enabled: bool) -> None:
        """Append a row."""
        self._items.append(CustomPhraseItem(key, value, order, enabled))
        self._set_need_save(True)

    def delete_item(self, row: int) -> None:
        """Remove a row; rows out of range are ignored."""
        if row < 0 or row >= len(self._items):
            return
        del self._items[row]
        self._set_need_save(True)

    def delete_all_items(self) -> None:
        """Remove every row."""
        if self._items:
            self._set_need_save(True)
        self._items.clear()

    def set_data(self, row: int, column: Column, value) -> bool:
        """Change one cell; returns whether the column is editable."""
        item = self._items[row]
        column = Column(column)
        if column is Column.ENABLE:
            item.enabled = bool(value)
        elif column is Column.KEY:
            item.key = str(value)
        elif column is Column.PHRASE:
            item.value = str(value)
        elif column is Column.ORDER:
            item.order = int(value)
        else:
            return False
        self._set_need_save(True)
        return True

    def data(self, row: int, column: Column):
        """Value shown in one cell, or None for a row out of range."""
        if row < 0 or row >= len(self._items):
            return None
        item = self._items[row]
        column = Column(column)
        if column is Column.ENABLE:
            return item.enabled
        if column is Column.KEY:
            return item.key
        if column is Column.PHRASE:
            return item.value
        return abs(item.order)

    @staticmethod
    def header(column: Column) -> Optional[str]:
        """Title of a column; the enable column has none."""
        return _HEADERS.get(Column(column))