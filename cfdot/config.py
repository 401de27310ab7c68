"""Connection settings for the BBS and Locket clients."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["TLSConfig"]


@dataclass
class TLSConfig:
    """Where to reach the BBS and Locket, and which TLS files to use."""

    bbs_url: str = ""
    locket_api_location: str = ""
    ca_cert_file: str = ""
    cert_file: str = ""
    key_file: str = ""
    skip_cert_verify: bool = False
    timeout: int = 0

    def merge(self, other: "TLSConfig") -> None:
        """Take every setting that ``other`` has set, in place."""
        if other.bbs_url:
            self.bbs_url = other.bbs_url
        if other.locket_api_location:
            self.locket_api_location = other.locket_api_location
        if other.timeout != 0:
            self.timeout = other.timeout
        if other.key_file:
            self.key_file = other.key_file
        if other.ca_cert_file:
            self.ca_cert_file = other.ca_cert_file
        if other.cert_file:
            self.cert_file = other.cert_file
        self.skip_cert_verify = self.skip_cert_verify or other.skip_cert_verify