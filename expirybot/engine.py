from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
import logging
from typing import Any

import typer

from expirybot.certs import check_certificate, read_cert_window
from expirybot.errors import (
    CertificateNotValid,
    CheckError,
    NoCertificatesFound,
    TLSConnectionFailed,
)
from expirybot.models import DEFAULT_THRESHOLD, CheckResult, Domain
from expirybot.probes import CHECK_TIMEOUT, Network, SystemNetwork
from expirybot.report import format_result

MAX_CONCURRENT_CHECKS = 10

logger = logging.getLogger(__name__)


def effective_threshold(domain: Domain, default_threshold: int) -> int:
    return domain.threshold if domain.threshold > 0 else default_threshold


async def check_domain(name: str, threshold: int, network: Network) -> CheckResult:
    """Resolve, dial and validate one domain.

    Check errors end the check and are carried on the result; nothing is
    retried.
    """

    try:
        await network.resolve(name)
        certs = await network.tls_connect(name)
        if not certs:
            raise NoCertificatesFound(name)

        try:
            window = read_cert_window(certs[0])
        except ValueError as exc:
            raise TLSConnectionFailed(f"unparsable leaf certificate: {exc}") from exc

        valid, days_remaining = check_certificate(window)
        if not valid:
            raise CertificateNotValid(name)
    except CheckError as exc:
        logger.debug(f"{name}: {exc.cause}")
        return CheckResult(domain=name, threshold=threshold, error=exc)

    logger.debug(f"{name}: {days_remaining} day(s) left, threshold {threshold}")
    return CheckResult(domain=name, threshold=threshold, days_remaining=days_remaining)


async def _write_results(
    queue: asyncio.Queue[CheckResult | None], echo: Callable[[str], Any]
) -> None:
    # Single consumer; workers never touch the output stream.
    while True:
        result = await queue.get()
        if result is None:
            return
        line = format_result(result)
        if line is not None:
            echo(line)


async def run_checks(
    domains: Iterable[Domain],
    default_threshold: int = DEFAULT_THRESHOLD,
    *,
    max_concurrent: int = MAX_CONCURRENT_CHECKS,
    timeout: float = CHECK_TIMEOUT,
    network: Network | None = None,
    gate: Any = None,
    echo: Callable[[str], Any] = typer.echo,
) -> None:
    """Check every domain once with at most max_concurrent checks in flight.

    gate is the admission gate (an async context manager); it defaults to a
    semaphore sized max_concurrent and is held for the whole network part
    of a check. Returns after every check has finished and its line, if
    any, has been written.
    """

    network = network or SystemNetwork(timeout=timeout)
    gate = gate or asyncio.Semaphore(max_concurrent)
    queue: asyncio.Queue[CheckResult | None] = asyncio.Queue()

    async def _worker(domain: Domain) -> None:
        threshold = effective_threshold(domain, default_threshold)
        async with gate:
            result = await check_domain(domain.name, threshold, network)
        await queue.put(result)

    writer = asyncio.create_task(_write_results(queue, echo))

    targets = list(domains)
    logger.info(f"checking {len(targets)} domain(s), max {max_concurrent} at once")

    outcomes = await asyncio.gather(
        *(_worker(d) for d in targets), return_exceptions=True
    )
    for domain, outcome in zip(targets, outcomes):
        if isinstance(outcome, Exception):
            logger.error(
                f"check for {domain.name} crashed: {type(outcome).__name__}: {outcome}"
            )

    await queue.put(None)
    await writer


def check_domains(
    domains: Iterable[Domain],
    default_threshold: int = DEFAULT_THRESHOLD,
    *,
    max_concurrent: int = MAX_CONCURRENT_CHECKS,
    timeout: float = CHECK_TIMEOUT,
    network: Network | None = None,
    gate: Any = None,
    echo: Callable[[str], Any] = typer.echo,
) -> None:
    asyncio.run(
        run_checks(
            domains,
            default_threshold,
            max_concurrent=max_concurrent,
            timeout=timeout,
            network=network,
            gate=gate,
            echo=echo,
        )
    )
