"""Recognising Sogou cell dictionary download links."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from urllib.parse import unquote, unquote_to_bytes, urlsplit

DOWNLOAD_HOST_BASE = "download.pinyin.sogou.com"
HOST_BASE = "pinyin.sogou.com"
URL_BASE = "http://" + HOST_BASE + "/dict/"

_DOWNLOAD_PATH_SUFFIX = "/dict/download_cell.php"


class Navigation(Enum):
    """What to do with a link the user followed."""

    ACCEPT = "accept"
    ALLOW = "allow"
    REDIRECT_HOME = "redirect_home"


@dataclass(frozen=True)
class CellDictLink:
    """A cell dictionary download link with its id and decoded name."""

    url: str
    id: str
    name: str


def decode_name(raw: Union[str, bytes]) -> str:
    """Percent-decode ``raw`` and read the bytes as UTF-8."""
    return unquote_to_bytes(raw).decode("utf-8", errors="replace")


def _query_item(query: str, key: str) -> Optional[str]:
    for item in query.split("&"):
        name, sep, value = item.partition("=")
        if name == key:
            return value if sep else ""
    return None


def _host(url: str) -> str:
    return urlsplit(url).hostname or ""


def parse_download_link(url: str) -> Optional[CellDictLink]:
    """The download link ``url`` points at, or None if it is not one."""
    parts = urlsplit(url)
    if (parts.hostname or "") not in (DOWNLOAD_HOST_BASE, HOST_BASE):
        return None
    # The site serves both "/dict/..." and "/d/dict/...".
    if not parts.path.endswith(_DOWNLOAD_PATH_SUFFIX):
        return None
    dict_id = unquote(_query_item(parts.query, "id") or "")
    name = decode_name(_query_item(parts.query, "name") or "")
    if not dict_id or not name:
        return None
    return CellDictLink(url=url, id=dict_id, name=name)


def classify_link(url: str) -> Navigation:
    """Accept download links, allow pages on the site, redirect everything else."""
    if parse_download_link(url) is not None:
        return Navigation.ACCEPT
    if _host(url) != HOST_BASE:
        return Navigation.REDIRECT_HOME
    return Navigation.ALLOW