from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging
import socket
import ssl

from expirybot.errors import DNSLookupFailed, TLSConnectionFailed

HTTPS_PORT = 443
CHECK_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


class Network(ABC):
    """Name resolution and TLS dialing used by the engine.

    Tests substitute a fake implementation; nothing else in the engine
    touches sockets.
    """

    @abstractmethod
    async def resolve(self, name: str) -> list[str]:
        """Return resolved addresses or raise DNSLookupFailed."""

    @abstractmethod
    async def tls_connect(self, name: str) -> list[bytes]:
        """Return the peer's DER certificates, leaf first.

        Raises TLSConnectionFailed on dial, handshake or verification errors.
        """


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SystemNetwork(Network):
    def __init__(self, timeout: float = CHECK_TIMEOUT):
        self.timeout = timeout
        self.port = HTTPS_PORT

    async def resolve(self, name: str) -> list[str]:
        loop = asyncio.get_running_loop()
        try:
            infos = await asyncio.wait_for(
                loop.getaddrinfo(name, None, type=socket.SOCK_STREAM),
                timeout=self.timeout,
            )
        except (OSError, asyncio.TimeoutError, UnicodeError) as exc:
            logger.debug(f"resolve {name} failed: {_error_text(exc)}")
            raise DNSLookupFailed(_error_text(exc)) from exc

        addresses: list[str] = []
        for info in infos:
            address = info[4][0]
            if address not in addresses:
                addresses.append(address)

        if not addresses:
            raise DNSLookupFailed(f"no addresses for {name}")
        return addresses

    async def tls_connect(self, name: str) -> list[bytes]:
        # Default context: chain and hostname verification enabled.
        context = ssl.create_default_context()

        writer = None
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    name, self.port, ssl=context, server_hostname=name
                ),
                timeout=self.timeout,
            )
            ssl_object = writer.get_extra_info("ssl_object")
            leaf = ssl_object.getpeercert(binary_form=True) if ssl_object else None
        except (OSError, asyncio.TimeoutError) as exc:
            logger.debug(f"tls connect {name}:{self.port} failed: {_error_text(exc)}")
            raise TLSConnectionFailed(_error_text(exc)) from exc
        finally:
            if writer is not None:
                writer.close()
                try:
                    await asyncio.wait_for(writer.wait_closed(), timeout=self.timeout)
                except (OSError, asyncio.TimeoutError):
                    # Peer dropped the connection before close_notify.
                    pass

        # The ssl module exposes only the leaf of the presented chain.
        return [leaf] if leaf else []
