import pytest

from pinyintools.pipeline import MessageLevel, Pipeline, PipelineJob


class RecordingJob(PipelineJob):
    def __init__(self, name, log, succeed=True, auto=True):
        super().__init__()
        self.name = name
        self.log = log
        self.succeed = succeed
        self.auto = auto

    def start(self):
        self.log.append(("start", self.name))
        if self.auto:
            self._emit_finished(self.succeed)

    def abort(self):
        self.log.append(("abort", self.name))

    def clean_up(self):
        self.log.append(("clean", self.name))

    def finish(self, success):
        self._emit_finished(success)

    def say(self, level, text):
        self._emit_message(level, text)


def make_pipeline():
    results = []
    messages = []
    pipeline = Pipeline(on_finished=results.append,
                        on_message=lambda lvl, txt: messages.append((lvl, txt)))
    return pipeline, results, messages


def test_all_jobs_succeed():
    log = []
    pipeline, results, _ = make_pipeline()
    pipeline.add_job(RecordingJob("a", log))
    pipeline.add_job(RecordingJob("b", log))
    pipeline.start()
    assert log == [("start", "a"), ("start", "b"), ("clean", "a"), ("clean", "b")]
    assert results == [True]


def test_failure_stops_pipeline_and_cleans_everything():
    log = []
    pipeline, results, _ = make_pipeline()
    pipeline.add_job(RecordingJob("a", log))
    pipeline.add_job(RecordingJob("b", log, succeed=False))
    pipeline.add_job(RecordingJob("c", log))
    pipeline.start()
    assert ("start", "c") not in log
    assert [entry for entry in log if entry[0] == "clean"] == [
        ("clean", "a"), ("clean", "b"), ("clean", "c")]
    assert results == [False]


def test_start_without_jobs_raises():
    pipeline, _, _ = make_pipeline()
    with pytest.raises(ValueError):
        pipeline.start()


def test_asynchronous_completion():
    log = []
    pipeline, results, _ = make_pipeline()
    first = RecordingJob("a", log, auto=False)
    pipeline.add_job(first)
    pipeline.add_job(RecordingJob("b", log))
    pipeline.start()
    assert log == [("start", "a")]
    assert results == []
    first.finish(True)
    assert results == [True]


def test_abort_running_job_once():
    log = []
    pipeline, results, _ = make_pipeline()
    pipeline.add_job(RecordingJob("a", log, auto=False))
    pipeline.start()
    pipeline.abort()
    pipeline.abort()
    assert log.count(("abort", "a")) == 1
    assert results == []


def test_abort_before_start_does_nothing():
    log = []
    pipeline, _, _ = make_pipeline()
    pipeline.add_job(RecordingJob("a", log))
    pipeline.abort()
    assert log == []


def test_reset_detaches_jobs():
    log = []
    pipeline, results, _ = make_pipeline()
    job = RecordingJob("a", log, auto=False)
    pipeline.add_job(job)
    pipeline.start()
    pipeline.reset()
    assert ("abort", "a") in log
    assert len(pipeline) == 0
    assert job.finished_listeners == []
    job.finish(True)
    assert results == []
    with pytest.raises(ValueError):
        pipeline.start()


def test_messages_are_forwarded():
    log = []
    pipeline, _, messages = make_pipeline()
    job = RecordingJob("a", log, auto=False)
    pipeline.add_job(job)
    job.say(MessageLevel.WARNING, "careful")
    assert messages == [(MessageLevel.WARNING, "careful")]


def test_job_is_abstract():
    with pytest.raises(TypeError):
        PipelineJob()