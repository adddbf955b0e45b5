import io
import urllib.error

from pinyintools.jobs import FileDownloader, RenameFile
from pinyintools.pipeline import MessageLevel


def attach(job):
    finished = []
    messages = []
    job.finished_listeners.append(finished.append)
    job.message_listeners.append(lambda lvl, txt: messages.append((lvl, txt)))
    return finished, messages


class FakeResponse:
    def __init__(self, payload, length=True):
        self._body = io.BytesIO(payload)
        self.headers = {"Content-Length": str(len(payload))} if length else {}
        self.closed = False

    def read(self, size):
        return self._body.read(size)

    def close(self):
        self.closed = True


def test_rename_moves_file(tmp_path):
    src = tmp_path / "a.dict_tmp"
    dst = tmp_path / "a.dict"
    src.write_text("data")
    job = RenameFile(src, dst)
    finished, messages = attach(job)
    job.start()
    assert finished == [True]
    assert dst.read_text() == "data"
    assert not src.exists()
    job.clean_up()
    assert dst.exists()


def test_rename_failure_reports_message_only(tmp_path):
    job = RenameFile(tmp_path / "missing", tmp_path / "out")
    finished, messages = attach(job)
    job.start()
    assert finished == []
    assert messages == [(MessageLevel.CRITICAL, "Converter crashed.")]


def test_download_request_failure(tmp_path):
    def opener(request):
        raise urllib.error.URLError("unreachable")

    job = FileDownloader("http://pinyin.sogou.com/x", tmp_path / "f", opener=opener)
    finished, messages = attach(job)
    job.start()
    assert finished == [False]
    assert (MessageLevel.WARNING, "Failed to create request.") in messages


def test_download_cannot_create_file(tmp_path):
    job = FileDownloader("http://pinyin.sogou.com/x",
                         tmp_path / "no" / "such" / "dir" / "f",
                         opener=lambda request: FakeResponse(b"abc"))
    finished, messages = attach(job)
    job.start()
    assert finished == [False]
    assert messages == [(MessageLevel.WARNING, "Create temporary file failed.")]


def test_update_progress_reports_in_steps(tmp_path):
    job = FileDownloader("http://pinyin.sogou.com/x", tmp_path / "f")
    _, messages = attach(job)
    job.update_progress(5, 100)
    job.update_progress(50, 0)
    assert messages == []
    job.update_progress(10, 100)
    job.update_progress(15, 100)
    job.update_progress(250, 100)
    assert [text for _, text in messages] == ["10% Downloaded.", "100% Downloaded."]


def test_unknown_length_gives_no_progress(tmp_path):
    dest = tmp_path / "f"
    job = FileDownloader("http://pinyin.sogou.com/x", dest,
                         opener=lambda request: FakeResponse(b"abc", length=False))
    finished, messages = attach(job)
    job.start()
    assert finished == [True]
    assert not any(text.endswith("% Downloaded.") for _, text in messages)


def test_clean_up_removes_download(tmp_path):
    dest = tmp_path / "f"
    job = FileDownloader("http://pinyin.sogou.com/x", dest,
                         opener=lambda request: FakeResponse(b"abc"))
    attach(job)
    job.start()
    assert dest.exists()
    job.clean_up()
    assert not dest.exists()
    job.clean_up()
    assert not dest.exists()