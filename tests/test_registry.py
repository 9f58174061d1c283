import threading
import time

import pytest

from slackbot.models import InteractionType
from slackbot.registry import (
    FlatOptionsProducer,
    InteractionRoute,
    ReadWriteLock,
    Registry,
)


def test_command_overwrite_keeps_latest():
    registry = Registry()
    first = lambda bot, command: "first"
    second = lambda bot, command: "second"
    registry.register_command("deploy", first)
    registry.register_command("deploy", second)
    assert registry.lookup_command("deploy") is second
    assert registry.lookup_command("missing") is None


def test_command_name_must_not_be_empty():
    with pytest.raises(ValueError):
        Registry().register_command("", lambda bot, command: None)


def test_events_append_in_order_per_kind():
    registry = Registry()
    a, b, c = (lambda bot, e: None), (lambda bot, e: None), (lambda bot, e: None)
    registry.register_event("message", a)
    registry.register_event("message", b)
    registry.register_event("app_mention", c)
    assert registry.lookup_events("message") == (a, b)
    assert registry.lookup_events("app_mention") == (c,)
    assert registry.lookup_events("reaction_added") == ()


def test_interactions_keyed_by_type():
    registry = Registry()
    route1 = InteractionRoute(handler=lambda bot, i: None)
    route2 = InteractionRoute(handler=lambda bot, i: None)
    registry.register_interaction(InteractionType.BLOCK_ACTIONS, route1)
    registry.register_interaction("block_actions", route2)
    assert registry.lookup_interactions(InteractionType.BLOCK_ACTIONS) == (route1, route2)
    assert registry.lookup_interactions(InteractionType.SHORTCUT) == ()
    assert registry.lookup_interactions(None) == ()


def test_unknown_interaction_type_is_rejected_at_registration():
    with pytest.raises(ValueError):
        Registry().register_interaction("not_a_type", InteractionRoute(handler=lambda bot, i: None))


def test_menu_options_store_any_value():
    registry = Registry()
    producer = FlatOptionsProducer(lambda bot, i: None)
    registry.register_menu_options("menu", producer)
    registry.register_menu_options("odd", object)
    assert registry.lookup_menu_options("menu") is producer
    assert registry.lookup_menu_options("odd") is object
    assert registry.lookup_menu_options("nope") is None


def test_lookup_returns_snapshot():
    registry = Registry()
    registry.register_event("message", lambda bot, e: None)
    snapshot = registry.lookup_events("message")
    registry.register_event("message", lambda bot, e: None)
    assert len(snapshot) == 1
    assert len(registry.lookup_events("message")) == 2


def test_describe_counts():
    registry = Registry()
    registry.register_command("a", lambda bot, c: None)
    registry.register_event("message", lambda bot, e: None)
    registry.register_event("message", lambda bot, e: None)
    registry.register_menu_options("m", FlatOptionsProducer(lambda bot, i: None))
    assert registry.describe() == {"commands": 1, "events": 2, "interactions": 0, "menu_options": 1}


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(2, timeout=2)

    def reader():
        with lock.read():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(3)
    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []
    writer_in = threading.Event()

    def writer():
        with lock.write():
            writer_in.set()
            time.sleep(0.1)
            events.append("write done")

    def reader():
        writer_in.wait(2)
        with lock.read():
            events.append("read")

    w = threading.Thread(target=writer)
    r = threading.Thread(target=reader)
    w.start()
    r.start()
    w.join(2)
    r.join(2)
    assert events == ["write done", "read"]


def test_concurrent_registration_never_loses_handlers():
    registry = Registry()
    seen_lengths = []

    def register(n):
        for _ in range(n):
            registry.register_event("message", lambda bot, e: None)

    def read():
        for _ in range(200):
            seen_lengths.append(len(registry.lookup_events("message")))

    threads = [threading.Thread(target=register, args=(50,)) for _ in range(4)]
    threads.append(threading.Thread(target=read))
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert len(registry.lookup_events("message")) == 200
    assert seen_lengths == sorted(seen_lengths)
