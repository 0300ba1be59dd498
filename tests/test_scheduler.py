"""
Testy schedulera: debounce, cykl życia, samopętla, brak kursu, izolacja błędów.
"""

import asyncio
import logging

import pytest
from bs4 import NavigableString

from conftest import FakeLoop
from observer.mutations import MutationHub, MutationRecord
from observer.scheduler import (
    DEFAULT_DEBOUNCE_MS,
    MutationScheduler,
    SchedulerState,
    accepts_inserted,
    create_scheduler,
)
from price_model.nodes import NodeSet
from price_tag.walker import annotate


class SpyAnnotate:
    """Zapisuje każde wywołanie (węzeł, kurs, visited)."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, node, rate, visited):
        self.calls.append((node, rate, visited))
        if self.fail_on is not None and self.fail_on(node):
            raise RuntimeError("annotate failed")

    @property
    def nodes(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def page(make_soup):
    return make_soup('<body><div id="feed"></div></body>')


@pytest.fixture
def hub():
    return MutationHub()


def _scheduler(page, hub, loop, annotate_fn, debounce_ms=250, visited=None):
    return create_scheduler(
        page.body,
        annotate_fn,
        debounce_ms,
        visited if visited is not None else NodeSet(),
        source=hub,
        loop=loop,
    )


class TestLifecycle:

    def test_created_idle(self, page, hub, fake_loop):
        scheduler = _scheduler(page, hub, fake_loop, SpyAnnotate())
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.rate is None
        assert hub.subscriber_count == 0

    def test_start_and_stop(self, page, hub, fake_loop, rate):
        scheduler = _scheduler(page, hub, fake_loop, SpyAnnotate())

        scheduler.start(rate)
        assert scheduler.state is SchedulerState.OBSERVING
        assert hub.subscriber_count == 1

        scheduler.stop()
        assert scheduler.state is SchedulerState.IDLE
        assert hub.subscriber_count == 0

    def test_stop_before_start_is_safe(self, page, hub, fake_loop):
        scheduler = _scheduler(page, hub, fake_loop, SpyAnnotate())
        scheduler.stop()
        scheduler.stop()
        assert scheduler.state is SchedulerState.IDLE

    def test_second_start_only_updates_rate(self, page, hub, fake_loop, rate, unit_rate):
        scheduler = _scheduler(page, hub, fake_loop, SpyAnnotate())
        scheduler.start(rate)
        scheduler.start(unit_rate)
        assert hub.subscriber_count == 1
        assert scheduler.rate is unit_rate

    def test_restart_after_stop(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        scheduler.stop()
        scheduler.start(rate)

        hub.append(page.find(id="feed"), "$1")
        fake_loop.advance(0.3)

        assert len(spy.calls) == 1
        assert hub.subscriber_count == 1

    def test_negative_debounce_rejected(self, page, hub):
        with pytest.raises(ValueError):
            MutationScheduler(page.body, SpyAnnotate(), -1, NodeSet(), hub)

    def test_default_debounce(self):
        assert DEFAULT_DEBOUNCE_MS == 250


class TestDebounce:

    def test_three_insertions_one_pass(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        feed = page.find(id="feed")

        a = hub.append(feed, page.new_tag("p"))
        fake_loop.advance(0.1)
        b = hub.append(feed, page.new_tag("p"))
        fake_loop.advance(0.1)
        c = hub.append(feed, page.new_tag("p"))
        assert scheduler.state is SchedulerState.PENDING
        assert scheduler.pending_count == 3

        fake_loop.advance(0.249)
        assert spy.calls == []

        fake_loop.advance(0.01)
        assert [id(n) for n in spy.nodes] == [id(a), id(b), id(c)]
        assert scheduler.batches_done == 1
        assert scheduler.state is SchedulerState.OBSERVING
        assert scheduler.pending_count == 0

    def test_shared_visited_and_rate_passed(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        visited = NodeSet()
        scheduler = _scheduler(page, hub, fake_loop, spy, visited=visited)
        scheduler.start(rate)

        hub.append(page.find(id="feed"), "$5")
        fake_loop.advance(0.25)

        (_, passed_rate, passed_visited), = spy.calls
        assert passed_rate is rate
        assert passed_visited is visited

    def test_insertions_during_pass_go_to_next_batch(self, page, hub, fake_loop, rate):
        feed = page.find(id="feed")
        inserted = []

        def annotate_and_insert(node, r, visited):
            if not inserted:
                inserted.append(hub.append(feed, "$2"))

        scheduler = _scheduler(page, hub, fake_loop, annotate_and_insert)
        scheduler.start(rate)

        hub.append(feed, "$1")
        fake_loop.advance(0.25)
        assert scheduler.batches_done == 1
        assert scheduler.state is SchedulerState.PENDING
        assert scheduler.pending_count == 1

        fake_loop.advance(0.25)
        assert scheduler.batches_done == 2
        assert scheduler.pending_count == 0

    def test_zero_debounce(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy, debounce_ms=0)
        scheduler.start(rate)
        hub.append(page.find(id="feed"), "$1")
        fake_loop.advance(0)
        assert len(spy.calls) == 1

    def test_filtered_insertions(self, page, hub, fake_loop, rate, make_soup):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        feed = page.find(id="feed")
        extra = make_soup("<script>x</script><style>y</style><!-- c --><div>ok</div>")
        script, style, comment, div = list(extra.contents)

        hub.extend(feed, [script, style, comment])
        assert scheduler.state is SchedulerState.OBSERVING
        assert scheduler.pending_count == 0

        hub.extend(feed, [div, "text"])
        fake_loop.advance(0.25)
        assert len(spy.calls) == 2

    def test_accepts_inserted(self, make_soup):
        soup = make_soup("<p>a</p><script>b</script><!-- c -->")
        p, script, comment = soup.contents
        assert accepts_inserted(p)
        assert accepts_inserted(p.contents[0])
        assert not accepts_inserted(script)
        assert not accepts_inserted(comment)


class TestStopCancelsWork:

    def test_stop_discards_pending(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        hub.append(page.find(id="feed"), "$1")

        scheduler.stop()
        fake_loop.advance(1)

        assert spy.calls == []
        assert scheduler.pending_count == 0
        assert scheduler.state is SchedulerState.IDLE

    def test_late_timer_after_stop_is_noop(self, page, hub, rate):
        loop = FakeLoop(honor_cancel=False)
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, loop, spy)
        scheduler.start(rate)
        hub.append(page.find(id="feed"), "$1")

        scheduler.stop()
        loop.advance(1)

        assert spy.calls == []
        assert scheduler.state is SchedulerState.IDLE

    def test_restarted_timer_ignores_stale_firing(self, page, hub, rate):
        loop = FakeLoop(honor_cancel=False)
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, loop, spy)
        scheduler.start(rate)
        feed = page.find(id="feed")

        hub.append(feed, "$1")
        loop.advance(0.2)
        hub.append(feed, "$2")
        loop.advance(0.1)
        assert spy.calls == []

        loop.advance(0.2)
        assert len(spy.calls) == 2
        assert scheduler.batches_done == 1

    def test_mutations_after_stop_ignored(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        callback = scheduler._on_mutations
        scheduler.stop()

        feed = page.find(id="feed")
        hub.append(feed, "$1")
        callback([MutationRecord(feed, (NavigableString("$2"),))])
        assert fake_loop.scheduled == 0
        assert scheduler.state is SchedulerState.IDLE


class TestMissingRate:

    def test_batch_dropped_without_rate(self, page, hub, fake_loop, caplog):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(None)
        hub.append(page.find(id="feed"), "$1")

        with caplog.at_level(logging.INFO):
            fake_loop.advance(0.25)

        assert spy.calls == []
        assert scheduler.pending_count == 0
        assert scheduler.state is SchedulerState.OBSERVING
        assert "E_MISSING_RATE" in caplog.text

    def test_rate_supplied_later(self, page, hub, fake_loop, rate):
        spy = SpyAnnotate()
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(None)
        scheduler.start(rate)

        hub.append(page.find(id="feed"), "$1")
        fake_loop.advance(0.25)
        assert len(spy.calls) == 1


class TestErrors:

    def test_no_event_loop_drops_batch(self, page, hub, rate, caplog):
        spy = SpyAnnotate()
        scheduler = create_scheduler(page.body, spy, 250, NodeSet(), source=hub)
        scheduler.start(rate)

        with caplog.at_level(logging.ERROR):
            hub.append(page.find(id="feed"), "$1")

        assert scheduler.state is SchedulerState.OBSERVING
        assert scheduler.pending_count == 0
        assert spy.calls == []
        assert "E_OBSERVER_FAILED" in caplog.text

    def test_failing_node_does_not_stop_batch(self, page, hub, fake_loop, rate, caplog):
        spy = SpyAnnotate(fail_on=lambda node: str(node) == "bad")
        scheduler = _scheduler(page, hub, fake_loop, spy)
        scheduler.start(rate)
        feed = page.find(id="feed")

        with hub.batch():
            hub.append(feed, "bad")
            hub.append(feed, "good")

        with caplog.at_level(logging.ERROR):
            fake_loop.advance(0.25)

        assert [str(n) for n in spy.nodes] == ["bad", "good"]
        assert scheduler.state is SchedulerState.OBSERVING
        assert "E_ANNOTATION_FAILED" in caplog.text

    def test_process_batch_counts_failures(self, page, hub, fake_loop, rate, make_soup):
        spy = SpyAnnotate(fail_on=lambda node: True)
        scheduler = _scheduler(page, hub, fake_loop, spy)
        nodes = list(make_soup("<p>a</p><p>b</p>").contents)
        assert scheduler.process_batch(nodes, rate) == 2
        assert scheduler.batches_done == 1

    def test_observe_failure_stays_idle(self, page, rate, fake_loop, caplog):
        class BrokenSource:
            def observe(self, root, callback):
                raise RuntimeError("no observer")

        scheduler = MutationScheduler(page.body, SpyAnnotate(), 250, NodeSet(), BrokenSource(), fake_loop)
        with caplog.at_level(logging.ERROR):
            scheduler.start(rate)

        assert scheduler.state is SchedulerState.IDLE
        assert "E_OBSERVER_FAILED" in caplog.text

    def test_disconnect_failure_still_stops(self, page, rate, fake_loop, caplog):
        class StickySubscription:
            def disconnect(self):
                raise RuntimeError("cannot disconnect")

        class Source:
            def observe(self, root, callback):
                return StickySubscription()

        scheduler = MutationScheduler(page.body, SpyAnnotate(), 250, NodeSet(), Source(), fake_loop)
        scheduler.start(rate)
        with caplog.at_level(logging.ERROR):
            scheduler.stop()

        assert scheduler.state is SchedulerState.IDLE
        assert "E_OBSERVER_FAILED" in caplog.text


class TestWithWalker:
    """Scheduler + prawdziwy walker na współdzielonym visited."""

    def test_new_content_annotated(self, page, hub, fake_loop, rate, make_soup):
        visited = NodeSet()
        annotate(page.body, rate, visited)
        scheduler = _scheduler(page, hub, fake_loop, annotate, visited=visited)
        scheduler.start(rate)

        card = make_soup("<p>Now $10</p>").p
        hub.append(page.find(id="feed"), card)
        fake_loop.advance(0.25)

        assert "(33.3k sats)" in card.get_text()

    def test_own_edits_reported_back_are_not_reprocessed(self, page, hub, fake_loop, rate, make_soup):
        visited = NodeSet()
        feed = page.find(id="feed")
        feed.append(make_soup("<p>Only $10 today</p>").p)
        annotate(page.body, rate, visited)
        after_initial = str(page)

        scheduler = _scheduler(page, hub, fake_loop, annotate, visited=visited)
        scheduler.start(rate)

        # host zgłasza podmieniony węzeł tekstowy jako nowo wstawiony
        text_node = feed.p.contents[0]
        hub.report(feed.p, [text_node])
        fake_loop.advance(0.25)

        assert str(page) == after_initial
        assert scheduler.batches_done == 1
        assert scheduler.state is SchedulerState.OBSERVING

    def test_asyncio_loop(self, page, hub, rate):
        async def scenario():
            visited = NodeSet()
            scheduler = create_scheduler(page.body, annotate, 10, visited, source=hub)
            scheduler.start(rate)
            node = hub.append(page.find(id="feed"), "$500")
            await asyncio.sleep(0.1)
            scheduler.stop()
            return node

        node = asyncio.run(scenario())
        assert "(1.67M sats)" in page.find(id="feed").get_text()
        assert node.parent is None
