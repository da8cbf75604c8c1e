# tests/test_viewer_controller.py

import pytest

from code_viewer.core.snippet_loader import Snippet
from code_viewer.gui.viewer_controller import ViewerController

# Short windows keep the suite fast; the behavior does not depend on the exact values.
DEBOUNCE_MS = 50
COPY_RESET_MS = 150


class FakeClipboard:
    """Stands in for the system clipboard and records what was copied."""

    def __init__(self, ok=True):
        self.ok = ok
        self.copied = []

    def __call__(self, text):
        self.copied.append(text)
        return self.ok


def ids(items):
    return [item.id for item in items]


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def controller(qtbot, sample_snippets, clipboard):
    """An initialized controller with short timing windows."""
    ctrl = ViewerController(copy_func=clipboard, debounce_ms=DEBOUNCE_MS, copy_reset_ms=COPY_RESET_MS)
    ctrl.initialize(sample_snippets)
    yield ctrl
    ctrl.teardown()


def apply_query(qtbot, controller, text):
    """Types a query and waits for the debounced filter to land."""
    with qtbot.waitSignal(controller.filtered_items_changed, timeout=1000):
        controller.set_query(text)


# --- Lifecycle ---

def test_initialize_shows_every_snippet(controller):
    assert ids(controller.get_filtered_items()) == ["1", "2", "3"]
    assert controller.get_active_item_id() is None
    assert controller.get_current_query() == ""
    assert controller.is_initialized()


def test_repeated_initialize_is_ignored(controller):
    assert controller.initialize([Snippet("9", "Other", "", "")]) is False
    assert ids(controller.get_filtered_items()) == ["1", "2", "3"]
    assert controller.get_item("9") is None


def test_initialize_skips_duplicate_ids(qtbot):
    ctrl = ViewerController(copy_func=FakeClipboard())

    assert ctrl.initialize([Snippet("1", "a", "", ""), Snippet("2", "b", "", ""), Snippet("1", "c", "", "")])

    assert ctrl.is_initialized()
    assert ids(ctrl.get_filtered_items()) == ["1", "2"]
    assert ctrl.get_item("1").title == "a"
    ctrl.teardown()


def test_operations_before_initialize_are_noops(qtbot, clipboard):
    ctrl = ViewerController(copy_func=clipboard, debounce_ms=DEBOUNCE_MS)

    ctrl.set_query("foo")
    ctrl.clear_query()
    assert ctrl.get_current_query() == ""
    assert not ctrl.is_search_pending()
    assert ctrl.select_item("1") is False

    result = ctrl.request_copy("1", "code")
    assert result.ok is False
    assert result.error
    assert clipboard.copied == []
    assert ctrl.get_filtered_items() == []


# --- Debounced Search ---

def test_debounce_applies_only_the_last_query(qtbot, controller):
    emitted = []
    controller.filtered_items_changed.connect(lambda items: emitted.append(ids(items)))

    controller.set_query("f")
    controller.set_query("foob")

    # The query is recorded right away, but the filter waits for the window.
    assert controller.get_current_query() == "foob"
    assert controller.is_search_pending()
    assert ids(controller.get_filtered_items()) == ["1", "2", "3"]

    qtbot.waitUntil(lambda: len(emitted) == 1, timeout=1000)
    qtbot.wait(DEBOUNCE_MS * 3)

    assert emitted == [["3"]]
    assert ids(controller.get_filtered_items()) == ["3"]


def test_query_changed_is_emitted_immediately(qtbot, controller):
    with qtbot.waitSignal(controller.query_changed, timeout=100) as blocker:
        controller.set_query("bar")
    assert blocker.args == ["bar"]


@pytest.mark.parametrize("query", ["foo", "FOO", "fOo"])
def test_filter_is_case_insensitive_and_keeps_order(qtbot, controller, query):
    apply_query(qtbot, controller, query)
    assert ids(controller.get_filtered_items()) == ["1", "3"]


def test_whitespace_query_matches_everything(qtbot, controller):
    apply_query(qtbot, controller, "   ")
    assert ids(controller.get_filtered_items()) == ["1", "2", "3"]


def test_clear_query_skips_the_debounce(qtbot, controller):
    apply_query(qtbot, controller, "foo")

    controller.set_query("foobar")
    controller.clear_query()

    assert not controller.is_search_pending()
    assert controller.get_current_query() == ""
    assert ids(controller.get_filtered_items()) == ["1", "2", "3"]


# --- Selection ---

def test_select_item_sets_active_and_requests_scroll(qtbot, controller):
    with qtbot.waitSignal(controller.scroll_to_item, timeout=100) as blocker:
        assert controller.select_item("2") is True
    assert blocker.args == ["2"]
    assert controller.get_active_item_id() == "2"


def test_active_item_resets_when_filtered_out(qtbot, controller):
    controller.select_item("2")

    with qtbot.waitSignal(controller.active_item_changed, timeout=1000) as blocker:
        controller.set_query("foo")

    assert blocker.args == [None]
    assert controller.get_active_item_id() is None


def test_active_item_survives_a_filter_that_keeps_it(qtbot, controller):
    controller.select_item("3")
    apply_query(qtbot, controller, "foo")
    assert controller.get_active_item_id() == "3"


def test_selecting_a_filtered_out_item_is_a_noop(qtbot, controller):
    apply_query(qtbot, controller, "foo")
    controller.select_item("1")

    with qtbot.assertNotEmitted(controller.scroll_to_item):
        assert controller.select_item("2") is False
        assert controller.select_item("does-not-exist") is False

    assert controller.get_active_item_id() == "1"


# --- Copy To Clipboard ---

def test_copy_state_round_trip(qtbot, controller, clipboard):
    result = controller.request_copy("1", "code")

    assert result.ok is True
    assert result.error is None
    assert clipboard.copied == ["code"]
    assert controller.get_copy_state("1") is True
    assert controller.get_copy_state("2") is False

    qtbot.waitUntil(lambda: controller.get_copy_state("1") is False, timeout=2000)


def test_repeated_copy_restarts_the_reset_window(qtbot, controller):
    resets = []
    controller.copy_state_changed.connect(lambda item_id, copied: None if copied else resets.append(item_id))

    controller.request_copy("1", "code")
    first_timer = controller._copy_timers["1"]
    qtbot.wait(COPY_RESET_MS // 2)
    controller.request_copy("1", "code")

    # Same timer, restarted: one pending reset, with a fresh full window.
    assert controller._copy_timers["1"] is first_timer
    assert len(controller._copy_timers) == 1
    assert first_timer.remainingTime() > COPY_RESET_MS // 2

    qtbot.waitUntil(lambda: controller.get_copy_state("1") is False, timeout=2000)
    qtbot.wait(COPY_RESET_MS)
    assert resets == ["1"]


def test_copy_timers_are_independent_per_item(qtbot, controller):
    controller.request_copy("1", "one")
    controller.request_copy("2", "two")
    assert set(controller._copy_timers) == {"1", "2"}

    controller._copy_timers["2"].start(COPY_RESET_MS * 10)
    qtbot.waitUntil(lambda: controller.get_copy_state("1") is False, timeout=2000)

    assert controller.get_copy_state("2") is True


def test_copy_result_is_delivered_asynchronously(qtbot, controller):
    results = []
    controller.copy_result.connect(lambda item_id, ok: results.append((item_id, ok)))

    controller.request_copy("3", "code")
    assert results == []

    qtbot.waitUntil(lambda: results == [("3", True)], timeout=1000)


def test_copy_failure_is_reported_not_raised(qtbot, controller, clipboard):
    clipboard.ok = False

    with qtbot.waitSignal(controller.copy_result, timeout=1000) as blocker:
        result = controller.request_copy("1", "code")

    assert result.ok is False
    assert result.error
    assert blocker.args == ["1", False]
    assert controller.get_copy_state("1") is False
    assert "1" not in controller._copy_timers


def test_copy_exception_is_reported_not_raised(qtbot, sample_snippets):
    def denied(text):
        raise RuntimeError("clipboard permission denied")

    ctrl = ViewerController(copy_func=denied)
    ctrl.initialize(sample_snippets)

    result = ctrl.request_copy("1", "code")

    assert result.ok is False
    assert "permission denied" in result.error
    assert ctrl.get_copy_state("1") is False
    ctrl.teardown()


# --- Teardown ---

def test_teardown_cancels_every_pending_timer(qtbot, controller):
    controller.request_copy("1", "code")
    controller.set_query("foo")

    fired = []
    for signal in (controller.filtered_items_changed, controller.active_item_changed,
                   controller.copy_state_changed, controller.copy_result):
        signal.connect(lambda *args: fired.append(args))

    controller.teardown()
    qtbot.wait(COPY_RESET_MS * 2)

    assert fired == []
    assert not controller.is_search_pending()
    assert controller._copy_timers == {}
    assert controller._pending_notifications == []
    assert controller.get_filtered_items() == []
    assert controller.get_copy_state("1") is False
    assert controller.get_current_query() == ""


def test_teardown_is_safe_to_repeat_and_allows_reinitialize(qtbot, controller, sample_snippets):
    controller.teardown()
    controller.teardown()

    assert controller.initialize(sample_snippets[:1]) is True
    assert ids(controller.get_filtered_items()) == ["1"]
