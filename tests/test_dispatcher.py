"""
Tests for the bounded alert dispatcher.
"""
import threading

from django.utils import timezone

from apps.alerts.dispatcher import AlertDispatcher
from apps.alerts.types import AlertMessage, DispatchRequest
from apps.aqi.types import Category

from conftest import RecordingNotifier


def make_request(contact, channel='email', subscription_id='sub_test'):
    message = AlertMessage(
        title='Air Quality Alert: Unhealthy',
        body='AQI: 174',
        aqi=174,
        category=Category.UNHEALTHY,
        health_message=Category.UNHEALTHY.health_message,
        recommendations=Category.UNHEALTHY.recommendations,
        location=(40.0, -74.0),
        timestamp=timezone.now(),
    )
    return DispatchRequest(
        subscription_id=subscription_id,
        channel=channel,
        contact=contact,
        message=message,
    )


class BrokenNotifier:
    def send(self, channel, contact, message):
        raise RuntimeError('transport exploded')


class TestAlertDispatcher:

    def test_delivers_submitted_requests(self, dispatcher, notifier):
        for n in range(5):
            assert dispatcher.submit(make_request(f"user{n}@example.com"))
        dispatcher.join()

        assert sorted(notifier.contacts()) == [f"user{n}@example.com" for n in range(5)]
        assert dispatcher.sent == 5
        assert len(dispatcher.receipts) == 5

    def test_phone_channel_goes_through_sms(self, dispatcher, notifier):
        dispatcher.submit(make_request('+15550100', channel='phone'))
        dispatcher.join()
        assert notifier.sent[0][0] == 'sms'

    def test_drop_oldest_when_full(self):
        notifier = RecordingNotifier()
        dispatcher = AlertDispatcher(notifier, queue_size=2, workers=1)

        assert dispatcher.submit(make_request('first@example.com'))
        assert dispatcher.submit(make_request('second@example.com'))
        assert dispatcher.submit(make_request('third@example.com'))

        assert dispatcher.dropped == 1
        assert dispatcher.pending() == 2

        dispatcher.start()
        dispatcher.shutdown(wait=True)
        assert notifier.contacts() == ['second@example.com', 'third@example.com']

    def test_submit_never_blocks_when_workers_are_stuck(self):
        release = threading.Event()
        notifier = RecordingNotifier(block=release)
        dispatcher = AlertDispatcher(notifier, queue_size=3, workers=1)
        dispatcher.start()

        for n in range(20):
            assert dispatcher.submit(make_request(f"user{n}@example.com"))
        assert dispatcher.pending() <= 3
        assert dispatcher.dropped >= 16

        release.set()
        dispatcher.shutdown(wait=True)
        assert dispatcher.sent + dispatcher.dropped == 20
        assert 'user19@example.com' in notifier.contacts()

    def test_shutdown_flushes_pending(self, notifier):
        dispatcher = AlertDispatcher(notifier, queue_size=20, workers=3)
        dispatcher.start()
        for n in range(10):
            dispatcher.submit(make_request(f"user{n}@example.com"))

        dispatcher.shutdown(wait=True)

        assert len(notifier.sent) == 10
        assert not dispatcher.running

    def test_shutdown_without_start_drains_inline(self, notifier):
        dispatcher = AlertDispatcher(notifier, queue_size=5, workers=2)
        dispatcher.submit(make_request('a@example.com'))
        dispatcher.submit(make_request('b@example.com'))

        dispatcher.shutdown(wait=True)
        assert notifier.contacts() == ['a@example.com', 'b@example.com']

    def test_shutdown_without_wait_discards(self, notifier):
        dispatcher = AlertDispatcher(notifier, queue_size=5, workers=2)
        dispatcher.submit(make_request('a@example.com'))
        dispatcher.shutdown(wait=False)
        assert notifier.sent == []

    def test_submit_after_shutdown_is_rejected(self, notifier):
        dispatcher = AlertDispatcher(notifier, queue_size=5, workers=1)
        dispatcher.start()
        dispatcher.shutdown(wait=True)

        assert dispatcher.submit(make_request('late@example.com')) is False
        assert notifier.sent == []

    def test_failures_are_counted_not_raised(self):
        notifier = RecordingNotifier(fail_for={'bad@example.com'})
        dispatcher = AlertDispatcher(notifier, queue_size=5, workers=1)
        dispatcher.start()
        dispatcher.submit(make_request('bad@example.com'))
        dispatcher.submit(make_request('good@example.com'))
        dispatcher.shutdown(wait=True)

        assert dispatcher.failed == 1
        assert dispatcher.sent == 1
        assert notifier.contacts() == ['good@example.com']

    def test_unexpected_error_keeps_worker_alive(self):
        dispatcher = AlertDispatcher(BrokenNotifier(), queue_size=5, workers=1)
        dispatcher.start()
        dispatcher.submit(make_request('a@example.com'))
        dispatcher.submit(make_request('b@example.com'))
        dispatcher.join()

        assert dispatcher.failed == 2
        assert dispatcher.running
        dispatcher.shutdown(wait=True)

    def test_start_is_idempotent(self, notifier):
        dispatcher = AlertDispatcher(notifier, queue_size=5, workers=2)
        dispatcher.start()
        dispatcher.start()
        assert len(dispatcher._threads) == 2
        dispatcher.shutdown(wait=True)
