"""
Bounded background dispatch of notification requests.
"""
import logging
import queue
import threading
from collections import deque
from typing import List, Optional

from django.conf import settings

from apps.core.constants import CHANNEL_TRANSPORTS
from apps.core.exceptions import DispatchFailure
from .notifiers import Notifier
from .types import DispatchRequest, Receipt

logger = logging.getLogger(__name__)

_STOP = object()


class AlertDispatcher:
    """
    Fixed pool of worker threads consuming a bounded queue.

    Back-pressure policy is drop-oldest: submit() never blocks; when the
    queue is full the oldest pending request is discarded (and counted in
    `dropped`) to make room for the new one. A failed delivery is logged
    and counted; it never affects other requests or the subscription.
    """

    def __init__(
        self,
        notifier: Notifier,
        queue_size: int = None,
        workers: int = None,
    ):
        aq_settings = getattr(settings, 'AIR_QUALITY_SETTINGS', {})
        self.notifier = notifier
        self.queue_size = queue_size or aq_settings.get('DISPATCH_QUEUE_SIZE', 100)
        self.worker_count = workers or aq_settings.get('DISPATCH_WORKERS', 4)

        self._queue = queue.Queue(maxsize=self.queue_size)
        self._submit_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self._accepting = True

        self.sent = 0
        self.failed = 0
        self.dropped = 0
        self.receipts = deque(maxlen=self.queue_size)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        if self._threads:
            return
        for i in range(self.worker_count):
            thread = threading.Thread(
                target=self._worker,
                name=f"alert-dispatch-{i}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
        logger.debug(f"Started {self.worker_count} dispatch workers")

    @property
    def running(self) -> bool:
        return bool(self._threads)

    def join(self):
        """Block until every queued request has been handled."""
        self._queue.join()

    def shutdown(self, wait: bool = True):
        """
        Stop accepting requests and stop the workers.

        With wait=True, pending requests are delivered first; otherwise they
        are discarded.
        """
        with self._submit_lock:
            self._accepting = False

        if not self._threads:
            if wait and not self._queue.empty():
                # Never started: deliver pending work on the caller's thread
                self._drain_inline()
            return

        if not wait:
            self._discard_pending()

        for _ in self._threads:
            self._queue.put(_STOP)
        for thread in self._threads:
            thread.join()
        self._threads = []
        logger.info(f"Dispatcher stopped (sent={self.sent}, failed={self.failed}, dropped={self.dropped})")

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, request: DispatchRequest) -> bool:
        """
        Queue a request without blocking.

        Returns False if the dispatcher is shut down.
        """
        with self._submit_lock:
            if not self._accepting:
                logger.warning(f"Dispatcher shut down, dropping request for {request.subscription_id}")
                return False

            while True:
                try:
                    self._queue.put_nowait(request)
                    return True
                except queue.Full:
                    self._drop_oldest()

    def pending(self) -> int:
        return self._queue.qsize()

    def _drop_oldest(self):
        try:
            oldest = self._queue.get_nowait()
        except queue.Empty:
            return
        self._queue.task_done()
        with self._stats_lock:
            self.dropped += 1
        logger.warning(
            f"Dispatch queue full, dropped oldest request for "
            f"{oldest.subscription_id} ({oldest.channel})"
        )

    def _discard_pending(self):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return
            self._queue.task_done()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def _worker(self):
        while True:
            request = self._queue.get()
            try:
                if request is _STOP:
                    return
                self._deliver(request)
            finally:
                self._queue.task_done()

    def _drain_inline(self):
        while True:
            try:
                request = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                self._deliver(request)
            finally:
                self._queue.task_done()

    def _deliver(self, request: DispatchRequest) -> Optional[Receipt]:
        transport = CHANNEL_TRANSPORTS.get(request.channel, request.channel)
        try:
            receipt = self.notifier.send(transport, request.contact, request.message)
        except DispatchFailure as e:
            with self._stats_lock:
                self.failed += 1
            logger.error(f"Alert delivery failed for {request.subscription_id}: {e}")
            return None
        except Exception as e:
            with self._stats_lock:
                self.failed += 1
            logger.exception(f"Unexpected error delivering alert for {request.subscription_id}: {e}")
            return None

        with self._stats_lock:
            self.sent += 1
            self.receipts.append(receipt)
        return receipt
