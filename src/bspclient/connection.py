"""BSP connection file record."""

from __future__ import annotations

from typing import final

from pydantic import BaseModel, ConfigDict, Field


@final
class ConnectionDetails(BaseModel):
    """How to start a build server, as read from a ``.bsp/*.json`` connection file.

    See https://build-server-protocol.github.io/docs/overview/server-discovery
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="allow",
        populate_by_name=True,
    )

    # The name of the build tool.
    name: str
    # The version of the build tool.
    version: str
    # The BSP version of the build tool.
    bsp_version: str = Field(alias="bspVersion")
    # The languages supported by this BSP server.
    languages: list[str]
    # Command arguments runnable via system processes to start a BSP server.
    argv: list[str]

    def to_json(self) -> dict[str, object]:
        """Return the record as it appears in a connection file."""
        return self.model_dump(mode="json", by_alias=True)
