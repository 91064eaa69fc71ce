from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import SplitResult, quote, unquote, urlsplit

from rpcexport.errors import InvalidUrlError

TOKEN_USERNAME = "token"

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_RPC_SCHEME = re.compile(r"^(http|ws)s?$", re.IGNORECASE)

# schemes that always carry a host; a missing port means the default one
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}

# what encodeURIComponent leaves alone
_COMPONENT_SAFE = "-_.!~*'()"

# forbidden host code points, C0 controls and DEL included
_FORBIDDEN_HOST = re.compile(r"[\x00-\x20#%/:<>?@\[\\\]^|\x7f]")


@dataclass(frozen=True)
class EndpointUrl:
    """The parts of an RPC url the projector cares about."""

    scheme: str
    host: str  # IPv6 literals keep their brackets
    port: str  # "" when absent or equal to the scheme default
    path: str
    username: str
    password: str  # still percent-encoded

    @property
    def origin(self) -> str:
        netloc = self.host
        if self.port:
            netloc = f"{netloc}:{self.port}"
        return f"{self.scheme}://{netloc}"

    @property
    def interface(self) -> str:
        # "/jsonrpc" -> "jsonrpc"
        return self.path[1:] if self.path.startswith("/") else self.path


@dataclass(frozen=True)
class ParsedEndpointUrl:
    url: str  # origin + path, credentials stripped
    secret: str  # plaintext


def _split(raw: str) -> tuple[SplitResult, Optional[int]]:
    try:
        parts = urlsplit((raw or "").strip())
        port = parts.port
    except ValueError as e:
        raise InvalidUrlError(str(raw), str(e)) from e
    return parts, port


def _host(raw: str, parts: SplitResult) -> str:
    host = parts.hostname or ""
    if not host:
        return ""
    if parts.netloc.rpartition("@")[2].startswith("["):
        # urlsplit already checked the literal
        return f"[{host}]"
    if _FORBIDDEN_HOST.search(host):
        raise InvalidUrlError(str(raw), "invalid host")
    return host


def parse_url(raw: str) -> EndpointUrl:
    """
    Parse `raw` the way a browser URL parser would for the schemes we care
    about. Raises InvalidUrlError instead of handing back a half-parsed url.
    """
    parts, port = _split(raw)

    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME.match(scheme):
        raise InvalidUrlError(str(raw), "missing scheme")

    host = _host(raw, parts)
    path = parts.path
    default_port = _DEFAULT_PORTS.get(scheme)
    if default_port is not None:
        if not host:
            raise InvalidUrlError(str(raw), "missing host")
        if not path:
            path = "/"

    port_str = "" if port is None or port == default_port else str(port)

    return EndpointUrl(
        scheme=scheme,
        host=host,
        port=port_str,
        path=path,
        username=parts.username or "",
        password=parts.password or "",
    )


def extract_secret(url: str | EndpointUrl) -> str:
    """Plaintext secret stored in the url password, "" when there is none."""
    parsed = url if isinstance(url, EndpointUrl) else parse_url(url)
    return unquote(parsed.password)


def decode_secret(url: str | EndpointUrl) -> str:
    """
    Secret as the options importer stores it: the percent-decoded
    password, base64 encoded. No password gives "".
    """
    plain = extract_secret(url)
    if not plain:
        return ""
    return base64.b64encode(plain.encode("utf-8")).decode("ascii")


def encode_secret(secret: str, url: str) -> str:
    """
    Embed `secret` into `url` as token:<secret>@. An empty secret returns
    the url untouched.
    """
    parsed = parse_url(url)
    if not secret:
        return url

    parts, _ = _split(url)
    password = quote(secret, safe=_COMPONENT_SAFE)
    netloc = f"{TOKEN_USERNAME}:{password}@{parsed.host}"
    if parsed.port:
        netloc = f"{netloc}:{parsed.port}"

    out = f"{parsed.scheme}://{netloc}{parsed.path}"
    if parts.query:
        out = f"{out}?{parts.query}"
    if parts.fragment:
        out = f"{out}#{parts.fragment}"
    return out


def parse_endpoint_url(raw: str) -> ParsedEndpointUrl:
    parsed = parse_url(raw)
    return ParsedEndpointUrl(
        url=parsed.origin + parsed.path,
        secret=extract_secret(parsed),
    )


def validate_endpoint_url(raw: str) -> bool:
    try:
        parsed = parse_url(raw)
    except InvalidUrlError:
        return False
    if len(parsed.path) < 2:
        return False
    return bool(_RPC_SCHEME.match(parsed.scheme))


def file_name_from_url(raw: str) -> str:
    """Last path segment of `raw`, or "" when there is nothing to name."""
    try:
        parsed = parse_url(raw)
    except InvalidUrlError:
        return ""
    if len(parsed.path) < 2:
        return ""
    return parsed.path.split("/")[-1]
