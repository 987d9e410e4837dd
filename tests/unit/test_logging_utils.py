import logging
import pytest
from railplan.utils.logging import SimpleFormatter, ProgressTracker, Colors, Symbols, setup_logging

class DummyRecord(logging.LogRecord):
    def __init__(self, levelname, msg):
        super().__init__(name="test", level=getattr(logging, levelname), pathname=__file__, lineno=0, msg=msg, args=(), exc_info=None)
        self.levelname = levelname

class DummyBar:
    def __init__(self):
        self.updates = []
        self.writes = []
        self.closed = False
        self.postfixes = []
    def update(self, n):
        self.updates.append(n)
    def write(self, msg):
        self.writes.append(msg)
    def close(self):
        self.closed = True
    def set_postfix_str(self, s):
        self.postfixes.append(s)

@pytest.mark.parametrize("level, color", [
    ("DEBUG", Colors.GRAY),
    ("INFO", Colors.CYAN),
    ("WARNING", Colors.YELLOW),
    ("ERROR", Colors.RED),
    ("CRITICAL", Colors.RED + Colors.BOLD)
])
def test_simple_formatter_colors(level, color):
    fmt = SimpleFormatter()
    out = fmt.format(DummyRecord(level, "hello"))
    assert out.startswith(color)
    assert out.endswith(Colors.RESET)
    assert "hello" in out


@pytest.mark.parametrize("level, symbol", [
    ("WARNING", Symbols.WARN),
    ("ERROR", Symbols.CROSS),
    ("CRITICAL", Symbols.CROSS),
])
def test_simple_formatter_marks_problems(level, symbol):
    out = SimpleFormatter().format(DummyRecord(level, "no route to B"))
    assert f"{symbol} no route to B" in out


def test_simple_formatter_leaves_info_plain():
    out = SimpleFormatter().format(DummyRecord("INFO", "W=0, T=T"))
    assert out == f"{Colors.CYAN}W=0, T=T{Colors.RESET}"


def test_setup_logging_installs_single_handler():
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, SimpleFormatter)


def test_progress_tracker_advance_and_close(monkeypatch):
    import railplan.utils.logging as logging_utils
    dummy = DummyBar()
    monkeypatch.setattr(logging_utils, 'tqdm', lambda **kwargs: dummy)

    pt = ProgressTracker(['a', 'b', 'c'])
    pt.advance("msg1", status='success')
    pt.advance()
    pt.close()

    assert dummy.updates == [1, 1]
    assert any("msg1" in w for w in dummy.writes)
    assert any("completed" in w.lower() for w in dummy.writes)
    assert dummy.closed


def test_disabled_progress_tracker_is_silent(monkeypatch):
    import railplan.utils.logging as logging_utils
    dummy = DummyBar()
    monkeypatch.setattr(logging_utils, 'tqdm', lambda **kwargs: dummy)

    pt = ProgressTracker(['a'], disable=True)
    pt.advance("hidden")
    pt.close()

    assert dummy.writes == []
    assert dummy.updates == [1]


def test_progress_tracker_labels_running_step(monkeypatch):
    import railplan.utils.logging as logging_utils
    dummy = DummyBar()
    monkeypatch.setattr(logging_utils, 'tqdm', lambda **kwargs: dummy)

    pt = ProgressTracker(['Build Network', 'Search Plan'])
    assert pt.current_step == 'Build Network'
    pt.advance("3 stations")
    assert pt.current_step == 'Search Plan'
    pt.advance()
    assert pt.current_step is None

    assert dummy.postfixes == ['Build Network', 'Search Plan', '']
    assert any("[Build Network] 3 stations" in w for w in dummy.writes)
