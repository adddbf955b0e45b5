from pinyintools.sogou import (
    DOWNLOAD_HOST_BASE,
    HOST_BASE,
    URL_BASE,
    CellDictLink,
    Navigation,
    classify_link,
    decode_name,
    parse_download_link,
)

SOURCE_EXAMPLE = (
    "http://download.pinyin.sogou.com/dict/download_cell.php?id=15207&name="
    "%D6%B2%CE%EF%B4%CA%BB%E3%B4%F3%C8%AB%A1%BE%B9%D9%B7%BD%CD%C6%BC%F6%A1%BF"
)


def test_constants_drive_link_handling():
    assert URL_BASE == "http://pinyin.sogou.com/dict/"
    assert classify_link(URL_BASE) is Navigation.ALLOW

    assert HOST_BASE == "pinyin.sogou.com"
    assert classify_link(f"http://{HOST_BASE}/some/page") is Navigation.ALLOW

    assert DOWNLOAD_HOST_BASE == "download.pinyin.sogou.com"
    url = (
        f"http://{DOWNLOAD_HOST_BASE}/dict/download_cell.php"
        "?id=1&name=%E4%BD%A0"
    )
    assert parse_download_link(url) == CellDictLink(url=url, id="1", name="你")
    assert classify_link(url) is Navigation.ACCEPT


def test_decode_name_utf8():
    assert decode_name("%E4%BD%A0%E5%A5%BD") == "你好"
    assert decode_name(b"%E4%BD%A0") == "你"


def test_decode_name_round_trip_plain_text():
    assert decode_name("abc") == "abc"


def test_parse_source_example():
    link = parse_download_link(SOURCE_EXAMPLE)
    assert link is not None
    assert link.id == "15207"
    assert link.url == SOURCE_EXAMPLE
    assert link.name


def test_parse_new_style_path():
    url = "https://pinyin.sogou.com/d/dict/download_cell.php?id=7&name=%E4%BD%A0"
    assert parse_download_link(url) == CellDictLink(url=url, id="7", name="你")


def test_parse_rejects_missing_parts():
    assert parse_download_link(
        "http://pinyin.sogou.com/dict/download_cell.php?id=7") is None
    assert parse_download_link(
        "http://pinyin.sogou.com/dict/download_cell.php?name=%E4%BD%A0") is None
    assert parse_download_link(
        "http://pinyin.sogou.com/dict/other.php?id=7&name=%E4%BD%A0") is None
    assert parse_download_link(
        "http://example.com/dict/download_cell.php?id=7&name=%E4%BD%A0") is None


def test_classify_links():
    assert classify_link(SOURCE_EXAMPLE) is Navigation.ACCEPT
    assert classify_link(URL_BASE) is Navigation.ALLOW
    assert classify_link("http://example.com/") is Navigation.REDIRECT_HOME


def test_incomplete_download_host_link_redirects():
    url = "http://download.pinyin.sogou.com/dict/download_cell.php?id=1"
    assert classify_link(url) is Navigation.REDIRECT_HOME


def test_incomplete_main_host_link_allowed():
    url = "http://pinyin.sogou.com/dict/download_cell.php?id=1"
    assert classify_link(url) is Navigation.ALLOW