"""
Notification transports: send(channel, contact, message) -> Receipt.
"""
import logging
import time
import uuid
from abc import ABC, abstractmethod
from email.utils import make_msgid
from typing import Dict, Optional

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from apps.core.constants import TRANSPORT_EMAIL, TRANSPORT_SMS
from apps.core.exceptions import DispatchFailure
from .types import AlertMessage, Receipt

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Delivers one message to one contact over one channel."""

    CHANNEL = None

    @abstractmethod
    def send(self, contact: str, message: AlertMessage) -> Receipt:
        """
        Raises:
            DispatchFailure: if the message could not be delivered
        """
        pass


class EmailTransport(Transport):
    """Email through Django's configured EMAIL_BACKEND."""

    CHANNEL = TRANSPORT_EMAIL

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, contact: str, message: AlertMessage) -> Receipt:
        message_id = make_msgid(domain='airquality.local')
        email = EmailMultiAlternatives(
            subject=message.title,
            body=message.body,
            from_email=self.from_email,
            to=[contact],
            headers={'Message-ID': message_id},
        )
        if message.html:
            email.attach_alternative(message.html, 'text/html')

        try:
            sent = email.send(fail_silently=False)
        except (OSError, ValueError) as e:
            raise DispatchFailure(self.CHANNEL, contact, str(e)) from e

        if not sent:
            raise DispatchFailure(self.CHANNEL, contact, 'backend accepted no messages')

        logger.info(f"Email notification sent to {contact}: {message_id}")
        return Receipt(channel=self.CHANNEL, contact=contact, message_id=message_id)


class SmsTransport(Transport):
    """
    SMS through an HTTP gateway.

    Without SMS_GATEWAY_URL the message is only logged, which is what
    development and test settings rely on.
    """

    CHANNEL = TRANSPORT_SMS

    def __init__(self, gateway_url: Optional[str] = None, token: Optional[str] = None):
        self.settings = settings.AIR_QUALITY_SETTINGS
        self.gateway_url = gateway_url if gateway_url is not None else self.settings.get('SMS_GATEWAY_URL')
        self.token = token if token is not None else self.settings.get('SMS_GATEWAY_TOKEN')
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry logic."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.settings.get('MAX_RETRIES', 3),
            backoff_factor=self.settings.get('RETRY_BACKOFF_FACTOR', 2),
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def send(self, contact: str, message: AlertMessage) -> Receipt:
        text = f"{message.title} - {message.body}"

        if not self.gateway_url:
            logger.info(f"SMS to {contact}: {text}")
            return Receipt(
                channel=self.CHANNEL,
                contact=contact,
                message_id=f"log-sms-{uuid.uuid4().hex[:12]}",
            )

        headers = {}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"

        start_time = time.time()
        try:
            response = self.session.post(
                self.gateway_url,
                json={'to': contact, 'message': text},
                headers=headers,
                timeout=self.settings.get('REQUEST_TIMEOUT', 10),
            )
            response.raise_for_status()
            payload = response.json() if response.content else {}
        except (requests.exceptions.RequestException, ValueError) as e:
            raise DispatchFailure(self.CHANNEL, contact, str(e)) from e

        response_time_ms = int((time.time() - start_time) * 1000)
        message_id = str(payload.get('id') or payload.get('sid') or uuid.uuid4().hex[:12])
        logger.info(f"SMS notification sent to {contact} in {response_time_ms}ms: {message_id}")
        return Receipt(
            channel=self.CHANNEL,
            contact=contact,
            message_id=message_id,
            extra={'response_time_ms': response_time_ms},
        )


class Notifier:
    """Routes send(channel, contact, message) to the transport for that channel."""

    def __init__(self, transports: Optional[Dict[str, Transport]] = None):
        if transports is None:
            transports = {
                TRANSPORT_EMAIL: EmailTransport(),
                TRANSPORT_SMS: SmsTransport(),
            }
        self.transports = transports

    def send(self, channel: str, contact: str, message: AlertMessage) -> Receipt:
        transport = self.transports.get(channel)
        if transport is None:
            raise DispatchFailure(channel, contact, 'no transport configured for channel')
        return transport.send(contact, message)
