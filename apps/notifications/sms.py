"""
SMS delivery backends.

Works like Django's EMAIL_BACKEND: ``settings.SMS_BACKEND`` names one of
the built-in backends ('console', 'locmem', 'twilio') or a dotted path to
a class with a ``send(to, body)`` method.
"""

import sys
import threading

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

# Messages sent through the locmem backend, for tests
outbox = []


class BaseSMSBackend:
    """Base class for SMS backends."""

    def send(self, to: str, body: str) -> str:
        """Send one message and return a provider message id."""
        raise NotImplementedError


class ConsoleSMSBackend(BaseSMSBackend):
    """Write messages to stdout instead of sending them."""

    _lock = threading.RLock()

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def send(self, to, body):
        with self._lock:
            self.stream.write(f"SMS to {to}:\n{body}\n{'-' * 40}\n")
            self.stream.flush()
        return 'console'


class LocmemSMSBackend(BaseSMSBackend):
    """Keep messages in ``apps.notifications.sms.outbox``."""

    def send(self, to, body):
        outbox.append({'to': to, 'body': body})
        return f'locmem-{len(outbox)}'


class TwilioSMSBackend(BaseSMSBackend):
    """
    Send through the Twilio Messages API.

    Requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER.
    """

    def __init__(self):
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_FROM_NUMBER
        if not (self.account_sid and self.auth_token and self.from_number):
            raise ImproperlyConfigured(
                "Twilio SMS backend needs TWILIO_ACCOUNT_SID, "
                "TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER"
            )

    def send(self, to, body):
        from twilio.rest import Client

        client = Client(self.account_sid, self.auth_token)
        message = client.messages.create(from_=self.from_number, to=to, body=body)
        return message.sid


BUILTIN_BACKENDS = {
    'console': ConsoleSMSBackend,
    'locmem': LocmemSMSBackend,
    'twilio': TwilioSMSBackend,
}


def get_sms_backend(name=None) -> BaseSMSBackend:
    """Instantiate the configured (or named) SMS backend."""
    name = name or getattr(settings, 'SMS_BACKEND', 'console')
    backend_class = BUILTIN_BACKENDS.get(name)
    if backend_class is None:
        backend_class = import_string(name)
    return backend_class()


def send_sms(to: str, body: str) -> str:
    """Send an SMS with the configured backend."""
    return get_sms_backend().send(to, body)
