from __future__ import annotations


class CheckError(Exception):
    """Per-domain check failure; reported once and never retried."""

    cause = "Check failed"


class DNSLookupFailed(CheckError):
    cause = "DNS lookup failed"


class TLSConnectionFailed(CheckError):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    @property
    def cause(self) -> str:  # type: ignore[override]
        return f"SSL connection failed or cert expired [{self.detail}]"


class NoCertificatesFound(CheckError):
    cause = "No certificates found"


class CertificateNotValid(CheckError):
    cause = "Certificate is not valid"
