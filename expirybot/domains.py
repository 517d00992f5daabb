from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from expirybot.models import DEFAULT_THRESHOLD, Domain


@dataclass(frozen=True)
class AddResult:
    domain: Domain
    updated: bool
    invalid_threshold: str | None = None


def _parse_threshold(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_domain_entry(
    text: str, default_threshold: int = DEFAULT_THRESHOLD
) -> tuple[Domain, str | None]:
    """Parse `domain[,threshold]`.

    Returns the domain and, when the threshold part is not an integer,
    the offending text (the default threshold is used instead).
    """

    parts = text.split(",")
    name = parts[0].strip()
    if len(parts) < 2:
        return Domain(name=name, threshold=default_threshold), None

    threshold = _parse_threshold(parts[1])
    if threshold is None:
        return Domain(name=name, threshold=default_threshold), parts[1]
    return Domain(name=name, threshold=threshold), None


def read_domains(
    path: Path, default_threshold: int = DEFAULT_THRESHOLD
) -> list[Domain]:
    """Read a domain list file.

    Format, one entry per line:
    - blank lines and `# comment` lines are skipped
    - `domain` or `domain,threshold`; a bad threshold falls back to the default
    """

    domains: list[Domain] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        domain, _ = parse_domain_entry(line, default_threshold)
        domains.append(domain)
    return domains


def write_domains(path: Path, domains: list[Domain]) -> None:
    content = "".join(f"{d.name},{d.threshold}\n" for d in domains)
    path.write_text(content, encoding="utf-8")


def add_domain(
    path: Path, entry: str, default_threshold: int = DEFAULT_THRESHOLD
) -> AddResult:
    """Add `domain[,threshold]` to the list file, or update its threshold."""

    new, invalid = parse_domain_entry(entry, default_threshold)
    if not new.name:
        raise ValueError(f"missing domain name in: {entry!r}")

    path.parent.mkdir(parents=True, exist_ok=True)

    domains: list[Domain] = []
    if path.exists():
        domains = read_domains(path, default_threshold)

    for i, existing in enumerate(domains):
        if existing.name == new.name:
            domains[i] = new
            write_domains(path, domains)
            return AddResult(domain=new, updated=True, invalid_threshold=invalid)

    domains.append(new)
    write_domains(path, domains)
    return AddResult(domain=new, updated=False, invalid_threshold=invalid)
