from __future__ import annotations

import re

_USERINFO = re.compile(r"//[^/?#@]*@")


def redact_url(url: str) -> str:
    # never echo credentials back into messages or logs
    return _USERINFO.sub("//***@", url or "")


class RpcExportError(Exception):
    """Base class for everything this package raises on purpose."""


class InvalidUrlError(RpcExportError, ValueError):
    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        msg = f"invalid RPC url {redact_url(url)!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ProjectionError(RpcExportError):
    """
    A record could not be projected. The whole batch is discarded;
    `index` points at the first offending record.
    """

    def __init__(self, index: int, url: str, reason: str = "") -> None:
        self.index = index
        self.url = url
        self.reason = reason
        msg = f"record #{index} has an invalid url {redact_url(url)!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
