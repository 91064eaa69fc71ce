from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HttpMethod = Literal["GET", "POST"]

WILDCARD = "*"


class EndpointRecord(BaseModel):
    """One entry of the connection manager's RPC list."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    url: str
    pattern: Optional[str] = ""  # comma-joined globs, e.g. "*,site.com/*"

    @property
    def patterns(self) -> tuple[str, ...]:
        # items are taken verbatim: " *" is not the wildcard
        raw = self.pattern or ""
        return tuple(p for p in raw.split(",") if p)

    @property
    def is_primary_candidate(self) -> bool:
        return WILDCARD in self.patterns


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class AuxiliaryEndpoint(_CamelModel):
    rpc_id: str
    rpc_alias: str = ""
    protocol: str = "ws"
    rpc_host: str = ""
    rpc_port: str = ""
    rpc_interface: str = ""
    secret: str = ""
    http_method: HttpMethod = "POST"


class FlatOptions(_CamelModel):
    """
    Flattened options as the downstream UI importer reads them.

    The primary endpoint lives in the rpc*/protocol/secret fields, every
    other endpoint in `extend_rpc_servers`. Keys the importer knows about
    but this model does not are kept as extras and written back unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    language: str = "TBD"
    theme: str = "light"
    title: str = "${downspeed}, ${upspeed} - ${title}"
    title_refresh_interval: int = 5000
    browser_notification: bool = False
    browser_notification_sound: bool = True
    browser_notification_frequency: str = "unlimited"

    # primary endpoint
    rpc_alias: str = ""
    rpc_host: str = "localhost"
    rpc_port: str = "6800"
    rpc_interface: str = "jsonrpc"
    protocol: str = "ws"
    http_method: HttpMethod = "POST"
    rpc_request_headers: str = ""
    secret: str = ""

    extend_rpc_servers: list[AuxiliaryEndpoint] = Field(default_factory=list)

    # UI preferences, carried through untouched
    web_socket_reconnect_interval: int = 5000
    global_stat_refresh_interval: int = 1000
    download_task_refresh_interval: int = 1000
    keyboard_shortcuts: bool = True
    swipe_gesture: bool = True
    drag_and_drop_tasks: bool = True
    rpc_list_display_order: str = "recentlyUsed"
    after_creating_new_task: str = "task-list"
    remove_old_task_after_retrying: bool = True
    confirm_task_removal: bool = True
    include_prefix_when_copying_from_task_details: bool = False
    show_pieces_info_in_task_detail_page: str = "le10240"
    after_retrying_task: str = "task-list-downloading"
    display_order: str = "default:asc"
    file_list_display_order: str = "default:asc"
    peer_list_display_order: str = "default:asc"

    @property
    def auxiliary_endpoints(self) -> list[AuxiliaryEndpoint]:
        return self.extend_rpc_servers
