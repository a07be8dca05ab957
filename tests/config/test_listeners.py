"""Unit tests for the change notifier.

Tests cover:
- Notification order
- Listener objects and plain callables
- Removal and registration during a fan-out
- Failing listeners
- Thread safety
"""

import threading

from courier.config import ChangeNotifier


def test_notifies_in_registration_order():
    """Test that listeners are called in registration order."""
    notifier = ChangeNotifier()
    calls = []
    notifier.add_listener(lambda key: calls.append(("l1", key)))
    notifier.add_listener(lambda key: calls.append(("l2", key)))
    notifier.add_listener(lambda key: calls.append(("l3", key)))

    notifier.notify("hostname")
    notifier.notify("encoding")

    assert calls == [
        ("l1", "hostname"), ("l2", "hostname"), ("l3", "hostname"),
        ("l1", "encoding"), ("l2", "encoding"), ("l3", "encoding"),
    ]


def test_listener_object(recorder):
    """Test that listener objects receive config_changed() calls."""
    notifier = ChangeNotifier()
    notifier.add_listener(recorder)

    notifier.notify("delivery.debug")

    assert recorder.keys == ["delivery.debug"]


def test_notify_without_listeners_is_noop():
    """Test that notifying with no listeners does nothing."""
    notifier = ChangeNotifier()
    notifier.notify("hostname")
    assert len(notifier) == 0


def test_duplicate_registration_is_called_twice():
    """Test that duplicates are called per entry and removed one at a time."""
    notifier = ChangeNotifier()
    calls = []

    def listener(key):
        calls.append(key)

    notifier.add_listener(listener)
    notifier.add_listener(listener)
    notifier.notify("hostname")

    assert calls == ["hostname", "hostname"]

    notifier.remove_listener(listener)
    notifier.notify("encoding")

    assert calls == ["hostname", "hostname", "encoding"]


def test_remove_unknown_listener_is_ignored():
    """Test that removing an unregistered listener is a no-op."""
    notifier = ChangeNotifier()
    notifier.add_listener(lambda key: None)

    notifier.remove_listener(lambda key: None)

    assert len(notifier) == 1


def test_removal_during_fan_out():
    """Test that removal during a fan-out only affects later notifications."""
    notifier = ChangeNotifier()
    calls = []

    def l2(key):
        calls.append("l2")

    def l1(key):
        calls.append("l1")
        notifier.remove_listener(l2)

    def l3(key):
        calls.append("l3")

    notifier.add_listener(l1)
    notifier.add_listener(l2)
    notifier.add_listener(l3)

    notifier.notify("hostname")
    assert calls == ["l1", "l2", "l3"]

    calls.clear()
    notifier.notify("hostname")
    assert calls == ["l1", "l3"]


def test_registration_during_fan_out_applies_to_next_notification():
    """Test that a listener added during a fan-out is called from the next one."""
    notifier = ChangeNotifier()
    calls = []

    def late(key):
        calls.append("late")

    def registering(key):
        calls.append("registering")
        notifier.add_listener(late)

    notifier.add_listener(registering)

    notifier.notify("hostname")
    assert calls == ["registering"]

    calls.clear()
    notifier.notify("hostname")
    assert calls == ["registering", "late"]


def test_failing_listener_does_not_stop_fan_out():
    """Test that a failing listener does not stop the others."""
    notifier = ChangeNotifier()
    calls = []

    def failing(key):
        raise RuntimeError("listener broke")

    notifier.add_listener(lambda key: calls.append("before"))
    notifier.add_listener(failing)
    notifier.add_listener(lambda key: calls.append("after"))

    notifier.notify("hostname")

    assert calls == ["before", "after"]


def test_listeners_snapshot_is_a_copy():
    """Test that listeners() returns a copy."""
    notifier = ChangeNotifier()
    notifier.add_listener(lambda key: None)

    snapshot = notifier.listeners()
    snapshot.clear()

    assert len(notifier) == 1


def test_thread_safety():
    """Test concurrent registration and notification."""
    notifier = ChangeNotifier()
    counter = []
    lock = threading.Lock()

    def listener(key):
        with lock:
            counter.append(key)

    def register_and_notify():
        notifier.add_listener(listener)
        notifier.notify("hostname")

    threads = [threading.Thread(target=register_and_notify) for _ in range(10)]

    for thread in threads:
        thread.start()

    for thread in threads:
        thread.join()

    assert len(notifier) == 10
    # Each fan-out sees at least the listener registered by its own thread
    assert len(counter) >= 10
