from sessionguard.session.events import TranscriptNotifier


def test_emit_reaches_subscribers():
    notifier = TranscriptNotifier()
    seen = []
    notifier.subscribe(seen.append)
    notifier.emit("/tmp/s.jsonl")
    assert seen == ["/tmp/s.jsonl"]


def test_unsubscribe():
    notifier = TranscriptNotifier()
    seen = []
    unsubscribe = notifier.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    notifier.emit("/tmp/s.jsonl")
    assert seen == []


def test_failing_listener_does_not_block_others():
    notifier = TranscriptNotifier()
    seen = []

    def broken(session_file):
        raise RuntimeError("listener bug")

    notifier.subscribe(broken)
    notifier.subscribe(seen.append)
    notifier.emit("/tmp/s.jsonl")
    assert seen == ["/tmp/s.jsonl"]


def test_empty_session_file_ignored():
    notifier = TranscriptNotifier()
    seen = []
    notifier.subscribe(seen.append)
    notifier.emit("")
    assert seen == []
