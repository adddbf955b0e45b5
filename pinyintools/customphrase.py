"""Custom phrase entries, their dynamic evaluation and the phrase file format.

A custom phrase file holds lines of the form ``key,order=value``. Keys are
ASCII letters, the order is a non-zero integer (negative means disabled),
and an empty value starts a multi-line phrase that runs until the next
valid entry line. Lines starting with ``#`` or ``;`` are comments.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Iterator, Optional, TextIO

_INT32_MAX = 2**31 - 1

_CHINESE_YEAR_DIGITS = ("〇", "一", "二", "三", "四", "五", "六", "七", "八", "九")
_CHINESE_WEEKDAYS = ("日", "一", "二", "三", "四", "五", "六")
_CHINESE_DIGITS = ("零", "一", "二", "三", "四", "五", "六", "七", "八", "九", "十")


def _is_alpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_space(c: str) -> bool:
    return c == " " or "\t" <= c <= "\r"


@dataclass
class CustomPhrase:
    """A single phrase with its order; a negative order marks it disabled."""

    order: int
    value: str

    def is_dynamic(self) -> bool:
        """Whether the phrase holds variables to be expanded."""
        return self.value.startswith("#")

    def evaluate(self, evaluator: Callable[[str], str]) -> str:
        """Expand ``$name`` and ``${name}`` variables through ``evaluator``."""
        if evaluator is None:
            raise ValueError("an evaluator is required")
        if not self.is_dynamic():
            return self.value
        return _expand(self.value[1:], evaluator)


class _State(Enum):
    NORMAL = auto()
    VARIABLE_START = auto()
    BRACED_VARIABLE = auto()
    VARIABLE = auto()


def _expand(content: str, evaluator: Callable[[str], str]) -> str:
    output: list[str] = []
    name: list[str] = []
    state = _State.NORMAL

    for c in content:
        if state is _State.VARIABLE:
            if _is_alpha(c) or _is_digit(c) or c == "_":
                name.append(c)
                continue
            output.append(evaluator("".join(name)))
            state = _State.NORMAL
            # The terminating character is processed as normal text below.

        if state is _State.NORMAL:
            if c == "$":
                state = _State.VARIABLE_START
            else:
                output.append(c)
        elif state is _State.VARIABLE_START:
            if c == "{":
                name = []
                state = _State.BRACED_VARIABLE
            elif c == "$":
                output.append("$")
                state = _State.NORMAL
            elif _is_alpha(c) or c == "_":
                name = [c]
                state = _State.VARIABLE
            else:
                output.append("$")
                output.append(c)
                state = _State.NORMAL
        elif state is _State.BRACED_VARIABLE:
            if c == "}":
                output.append(evaluator("".join(name)))
                state = _State.NORMAL
            else:
                name.append(c)

    if state is _State.VARIABLE_START:
        output.append("$")
    elif state is _State.BRACED_VARIABLE:
        output.append("${")
        output.append("".join(name))
    elif state is _State.VARIABLE:
        output.append(evaluator("".join(name)))

    return "".join(output)


def to_chinese_year(num: str) -> str:
    """Spell each decimal digit of ``num`` as a Chinese numeral."""
    if not all(_is_digit(c) for c in num):
        raise ValueError(f"not a decimal number: {num!r}")
    return "".join(_CHINESE_YEAR_DIGITS[int(c)] for c in num)


def to_chinese_weekday(num: int) -> str:
    """Chinese name of a weekday, where 0 is Sunday."""
    if not 0 <= num < 7:
        raise ValueError(f"weekday out of range: {num}")
    return _CHINESE_WEEKDAYS[num]


def to_chinese_two_digit_number(num: int, leading_zero: bool) -> str:
    """Write a number below 100 in Chinese numerals."""
    if not 0 <= num < 100:
        raise ValueError(f"number out of range: {num}")
    if num == 0:
        return _CHINESE_DIGITS[0]
    tens, ones = divmod(num, 10)
    if tens == 0:
        prefix = _CHINESE_DIGITS[0] if leading_zero else ""
    elif tens == 1:
        prefix = _CHINESE_DIGITS[10]
    else:
        prefix = _CHINESE_DIGITS[tens] + _CHINESE_DIGITS[10]
    suffix = _CHINESE_DIGITS[ones] if ones else ""
    return prefix + suffix


def _weekday(now: _dt.datetime) -> int:
    return now.isoweekday() % 7


def _half_hour(now: _dt.datetime) -> int:
    return now.hour % 12 or 12


_BUILTINS: dict[str, Callable[[_dt.datetime], str]] = {
    "year": lambda t: str(t.year),
    "year_yy": lambda t: f"{t.year % 100:02d}",
    "month": lambda t: str(t.month),
    "month_mm": lambda t: f"{t.month:02d}",
    "day": lambda t: str(t.day),
    "day_dd": lambda t: f"{t.day:02d}",
    "weekday": lambda t: str(_weekday(t)),
    "fullhour": lambda t: f"{t.hour:02d}",
    "halfhour": lambda t: f"{_half_hour(t):02d}",
    "ampm": lambda t: "AM" if t.hour < 12 else "PM",
    "minute": lambda t: f"{t.minute:02d}",
    "second": lambda t: f"{t.second:02d}",
    "year_cn": lambda t: to_chinese_year(str(t.year)),
    "year_yy_cn": lambda t: to_chinese_year(f"{t.year % 100:02d}"),
    "month_cn": lambda t: to_chinese_two_digit_number(t.month, False),
    "day_cn": lambda t: to_chinese_two_digit_number(t.day, False),
    "weekday_cn": lambda t: to_chinese_weekday(_weekday(t)),
    "fullhour_cn": lambda t: to_chinese_two_digit_number(t.hour, False),
    "halfhour_cn": lambda t: to_chinese_two_digit_number(_half_hour(t), False),
    "ampm_cn": lambda t: "上午" if t.hour < 12 else "下午",
    "minute_cn": lambda t: to_chinese_two_digit_number(t.minute, True),
    "second_cn": lambda t: to_chinese_two_digit_number(t.second, True),
}


def builtin_evaluator(key: str, now: Optional[_dt.datetime] = None) -> str:
    """Value of a built-in date/time variable; unknown names give ``""``."""
    func = _BUILTINS.get(key)
    if func is None:
        return ""
    return func(now if now is not None else _dt.datetime.now())


def parse_custom_phrase_line(line: str) -> Optional[tuple[str, int, str]]:
    """Split ``key,order=value`` into its parts, or return None if invalid."""
    i = 0
    while i < len(line) and _is_alpha(line[i]):
        i += 1
    if i == 0:
        return None
    key = line[:i]
    if i >= len(line) or line[i] != ",":
        return None
    i += 1
    sign = 1
    if i < len(line) and line[i] == "-":
        sign = -1
        i += 1
    order_start = i
    while i < len(line) and _is_digit(line[i]):
        i += 1
    if i == order_start or i >= len(line) or line[i] != "=":
        return None

    order = int(line[order_start:i])
    if order > _INT32_MAX or order == 0:
        return None
    return key, order * sign, line[i + 1 :]


def normalize_phrases(phrases: list[CustomPhrase]) -> None:
    """Sort phrases by order in place and make enabled orders strictly rise."""
    if not phrases:
        return
    phrases.sort(key=lambda phrase: phrase.order)
    current = phrases[0].order
    for phrase in phrases[1:]:
        if current > 0 and phrase.order <= current:
            phrase.order = current + 1
        current = phrase.order


def escape_for_value(text: str) -> str:
    """Escape backslashes, newlines and quotes; quote text with whitespace."""
    escaped = (
        text.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')
    )
    if any(_is_space(c) for c in text):
        return f'"{escaped}"'
    return escaped


def unescape_for_value(text: str) -> Optional[str]:
    """Reverse :func:`escape_for_value`; None if the text is badly escaped."""
    unquote = len(text) >= 2 and text.startswith('"') and text.endswith('"')
    if unquote:
        text = text[1:-1]
    result: list[str] = []
    escaping = False
    for c in text:
        if not escaping:
            if c == "\\":
                escaping = True
            else:
                result.append(c)
            continue
        if c == "\\":
            result.append("\\")
        elif c == "n":
            result.append("\n")
        elif c == '"' and unquote:
            result.append('"')
        else:
            return None
        escaping = False
    if escaping:
        return None
    return "".join(result)


def _is_comment(line: str) -> bool:
    return line.startswith(";") or line.startswith("#")


class CustomPhraseDict:
    """Phrases grouped by key, loaded from and saved to the phrase format."""

    def __init__(self) -> None:
        self._data: dict[str, list[CustomPhrase]] = {}

    def clear(self) -> None:
        """Remove every phrase."""
        self._data.clear()

    def load(self, stream: Iterable[str], load_disabled: bool = False) -> None:
        """Replace the contents with the phrases read from ``stream``."""
        self.clear()
        multiline: Optional[CustomPhrase] = None
        dummy = CustomPhrase(-1, "")

        def finish_multiline() -> None:
            nonlocal multiline
            if multiline is not None and multiline.value:
                multiline.value = multiline.value[:-1]
            multiline = None

        for raw in stream:
            line = raw[:-1] if raw.endswith("\n") else raw
            if multiline is None and _is_comment(line):
                continue

            parsed = parse_custom_phrase_line(line)
            if parsed is not None:
                finish_multiline()
                key, order, data = parsed
                value = data
                if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                    unescaped = unescape_for_value(value)
                    if unescaped is not None:
                        value = unescaped

                if not load_disabled and order < 0:
                    if not data:
                        multiline = dummy
                    continue

                entry = self._data.get(key)
                if entry is None:
                    if len(self._data) >= _INT32_MAX:
                        break
                    entry = self._data[key] = []
                phrase = CustomPhrase(order, value)
                entry.append(phrase)
                if not data:
                    multiline = phrase
            elif multiline is not None and multiline is not dummy:
                # Every line gets a newline; the last one is dropped at the end.
                multiline.value += line + "\n"

        finish_multiline()
        for entry in self._data.values():
            normalize_phrases(entry)

    def lookup(self, key: str) -> Optional[list[CustomPhrase]]:
        """Phrases stored under ``key``, or None if the key is unknown."""
        return self._data.get(key)

    def _entry(self, key: str) -> Optional[list[CustomPhrase]]:
        entry = self._data.get(key)
        if entry is None:
            if len(self._data) >= _INT32_MAX:
                return None
            entry = self._data[key] = []
        return entry

    def add_phrase(self, key: str, value: str, order: int) -> None:
        """Append a phrase; an order of zero is ignored."""
        if order == 0:
            return
        entry = self._entry(key)
        if entry is not None:
            entry.append(CustomPhrase(order, value))

    def pin_phrase(self, key: str, value: str) -> None:
        """Move ``value`` to the front of ``key``'s phrases."""
        self.remove_phrase(key, value)
        entry = self._entry(key)
        if entry is not None:
            entry.insert(0, CustomPhrase(1, value))
            normalize_phrases(entry)

    def remove_phrase(self, key: str, value: str) -> None:
        """Drop every phrase under ``key`` whose value equals ``value``."""
        entry = self._data.get(key)
        if entry is None:
            return
        entry[:] = [phrase for phrase in entry if phrase.value != value]

    def items(self) -> Iterator[tuple[str, list[CustomPhrase]]]:
        """Yield ``(key, phrases)`` pairs in key order."""
        for key in sorted(self._data, key=lambda k: k.encode("utf-8")):
            yield key, self._data[key]

    def save(self, stream: TextIO) -> None:
        """Write every phrase to ``stream`` in the phrase file format."""
        for key, phrases in self.items():
            for phrase in phrases:
                escaped = escape_for_value(phrase.value)
                stream.write(f"{key},{phrase.order}=")
                if len(escaped) != len(phrase.value):
                    if not escaped.startswith('"'):
                        stream.write('"')
                    stream.write(escaped)
                    if not escaped.endswith('"'):
                        stream.write('"')
                else:
                    stream.write(phrase.value)
                stream.write("\n")