"""Shared test utilities for codeassist tests."""

from __future__ import annotations

from typing import Any

from codeassist.transform.messages import MessageKind, OutboundMessage


class RecordingSink:
    """Message sink that collects outbound chat messages."""

    def __init__(self) -> None:
        self.messages: list[OutboundMessage] = []

    async def __call__(self, message: OutboundMessage) -> None:
        self.messages.append(message)

    def of_kind(self, kind: MessageKind) -> list[OutboundMessage]:
        return [m for m in self.messages if m.kind is kind]

    def payloads(self, kind: MessageKind, key: str) -> list[Any]:
        return [m.payload.get(key) for m in self.of_kind(kind)]

    @property
    def texts(self) -> list[str]:
        return self.payloads(MessageKind.CHAT, "text")

    @property
    def error_codes(self) -> list[str]:
        return self.payloads(MessageKind.ERROR_RESPONSE, "code")

    @property
    def error_texts(self) -> list[str | None]:
        return self.payloads(MessageKind.ERROR_RESPONSE, "text")

    @property
    def prompts(self) -> list[str]:
        return self.payloads(MessageKind.PROMPT, "prompt")


def sct_xml(
    source_vendor: str = "ORACLE",
    target_vendor: str = "AURORA_POSTGRESQL",
    schemas: tuple[str, ...] = ("hr", "sales"),
) -> str:
    """Build SQL conversion project metadata (.sct) text.

    Args:
        source_vendor: Vendor of the source database server.
        target_vendor: Vendor of the target database server.
        schemas: Schema names listed under the source server.

    Returns:
        XML document text
    """
    schema_nodes = "".join(
        f'<FullNameNodeInfo typeNode="schema" nameNode="{name}"/>' for name in schemas
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<tree>
  <instances>
    <ProjectModel>
      <entities>
        <sources>
          <DbServer vendor="{source_vendor}" name="oracle-prod"/>
        </sources>
        <targets>
          <DbServer vendor="{target_vendor}" name="aurora-prod"/>
        </targets>
      </entities>
      <relations>
        <server-node-location>
          <FullNameNodeInfoList>
            <nameParts>
              <FullNameNodeInfo typeNode="server" nameNode="oracle-prod"/>
              {schema_nodes}
            </nameParts>
          </FullNameNodeInfoList>
        </server-node-location>
      </relations>
    </ProjectModel>
  </instances>
</tree>
"""
