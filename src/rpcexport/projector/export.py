from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from rpcexport.codec.url import EndpointUrl, decode_secret, parse_url
from rpcexport.domain.models import AuxiliaryEndpoint, EndpointRecord, FlatOptions
from rpcexport.errors import InvalidUrlError, ProjectionError
from rpcexport.projector.ids import IdGenerator, TimestampIdGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionResult:
    """
    options: None only for an empty record list.
    error:   set when a record failed to parse; options then hold the
             state from before any record was applied.
    """

    options: Optional[FlatOptions]
    error: Optional[ProjectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[FlatOptions]:
        if self.error is not None:
            raise self.error
        return self.options


def select_primary_index(records: Sequence[EndpointRecord]) -> int:
    # first wildcard wins; no wildcard anywhere -> index 0
    for i, r in enumerate(records):
        if r.is_primary_candidate:
            return i
    return 0


def _endpoint_fields(record: EndpointRecord, url: EndpointUrl) -> dict:
    return {
        "rpc_alias": record.name,
        "protocol": url.scheme,
        "rpc_host": url.host,
        "rpc_port": url.port,
        "rpc_interface": url.interface,
        "secret": decode_secret(url),
    }


def _start_options(base: Optional[FlatOptions]) -> FlatOptions:
    options = base.model_copy(deep=True) if base is not None else FlatOptions()
    options.extend_rpc_servers = []
    return options


def project_endpoints(
    records: Optional[Iterable[EndpointRecord]],
    base: Optional[FlatOptions] = None,
    id_generator: Optional[IdGenerator] = None,
) -> ProjectionResult:
    """
    Project an RPC list onto flat options.

    The primary record (first one routing "*", else the first one) is
    merged into a copy of `base`; all others become extendRpcServers
    entries, in input order. `base` itself is never modified.

    One bad url discards the whole batch: the result then carries the
    pre-loop options and the index of the offending record.
    """
    records = list(records or [])
    if not records:
        return ProjectionResult(options=None)

    ids = id_generator or TimestampIdGenerator()
    primary = select_primary_index(records)
    initial = _start_options(base)

    primary_fields: dict = {}
    auxiliary: list[AuxiliaryEndpoint] = []

    for i, record in enumerate(records):
        try:
            url = parse_url(record.url)
        except InvalidUrlError as e:
            return ProjectionResult(
                options=initial,
                error=ProjectionError(i, record.url, e.reason),
            )

        fields = _endpoint_fields(record, url)
        if i == primary:
            # httpMethod stays whatever the base says
            primary_fields = fields
        else:
            auxiliary.append(
                AuxiliaryEndpoint(rpc_id=ids.next(), http_method="POST", **fields)
            )

    options = initial.model_copy(update=primary_fields, deep=True)
    options.extend_rpc_servers = auxiliary

    logger.debug(
        "projected %d endpoint(s): primary=#%d auxiliary=%d",
        len(records),
        primary,
        len(auxiliary),
    )
    return ProjectionResult(options=options)


def export_rpc_list(
    records: Optional[Iterable[EndpointRecord]],
    base: Optional[FlatOptions] = None,
    id_generator: Optional[IdGenerator] = None,
) -> Optional[FlatOptions]:
    """
    Convenience wrapper for import flows that must not blow up: returns
    None for nothing-to-export, and on a bad url logs a warning and
    returns the options as they were before the batch.
    """
    result = project_endpoints(records, base=base, id_generator=id_generator)
    if result.error is not None:
        logger.warning("export_rpc_list: %s", result.error)
    return result.options
