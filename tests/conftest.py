"""
Shared fixtures: generated certificates and a scripted network.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from expirybot.errors import DNSLookupFailed, TLSConnectionFailed
from expirybot.probes import Network


def make_cert_der(not_before, not_after, name="example.com"):
    """Build a self-signed DER certificate with the given window."""
    key = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


def cert_expiring_in(days, hours=1):
    now = datetime.now(timezone.utc)
    return make_cert_der(now - timedelta(days=30), now + timedelta(days=days, hours=hours))


class FakeNetwork(Network):
    """Deterministic stand-in for DNS and TLS.

    certs: name -> list of DER certificates returned by tls_connect
    unresolvable: names whose lookup fails
    tls_errors: name -> error text raised from tls_connect
    crash: names whose lookup raises an unexpected RuntimeError
    """

    def __init__(self, certs=None, unresolvable=(), tls_errors=None, crash=(), delay=0.0):
        self.certs = certs or {}
        self.unresolvable = set(unresolvable)
        self.tls_errors = tls_errors or {}
        self.crash = set(crash)
        self.delay = delay
        self.calls = []
        self.active = 0
        self.peak = 0

    async def _io(self):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1

    async def resolve(self, name):
        self.calls.append(("resolve", name))
        await self._io()
        if name in self.crash:
            raise RuntimeError("resolver exploded")
        if name in self.unresolvable:
            raise DNSLookupFailed(name)
        return ["192.0.2.1"]

    async def tls_connect(self, name):
        self.calls.append(("tls_connect", name))
        await self._io()
        if name in self.tls_errors:
            raise TLSConnectionFailed(self.tls_errors[name])
        return self.certs.get(name, [])


class InstrumentedGate:
    """Admission gate that records the peak number of holders."""

    def __init__(self, capacity):
        self._sem = asyncio.Semaphore(capacity)
        self.active = 0
        self.peak = 0
        self.entered = 0

    async def __aenter__(self):
        await self._sem.acquire()
        self.active += 1
        self.entered += 1
        self.peak = max(self.peak, self.active)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.active -= 1
        self._sem.release()
        return False


@pytest.fixture(autouse=True)
def _reset_expirybot_logger():
    yield
    logger = logging.getLogger("expirybot")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
