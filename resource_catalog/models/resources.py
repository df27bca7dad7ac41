"""
Resource record models.

Every resource kind shares the same base shape (id, title, description,
path, lastUpdated) and adds kind-specific fields. The ``kind`` literal tags
each variant so collections can be dispatched without probing fields.
"""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


class ResourceKind(str, Enum):
    """The six managed resource kinds."""

    AGENT = "agent"
    PROMPT = "prompt"
    INSTRUCTION = "instruction"
    SKILL = "skill"
    HOOK = "hook"
    WORKFLOW = "workflow"


class HookEvent(str, Enum):
    """Events a hooks.json may bind handlers to."""

    SESSION_START = "sessionStart"
    SESSION_END = "sessionEnd"
    USER_PROMPT_SUBMITTED = "userPromptSubmitted"
    PRE_TOOL_USE = "preToolUse"
    POST_TOOL_USE = "postToolUse"
    ERROR_OCCURRED = "errorOccurred"


KNOWN_HOOK_EVENTS = frozenset(e.value for e in HookEvent)


class McpServerConfig(BaseModel):
    """An MCP server declared in an agent's ``mcp-servers`` frontmatter."""

    name: str
    type: Optional[str] = None
    command: Optional[str] = None
    args: Optional[list[Any]] = None
    url: Optional[str] = None
    headers: Optional[dict[str, Any]] = None
    env: Optional[dict[str, Any]] = None

    @property
    def is_http(self) -> bool:
        return (self.type or "").lower() == "http"


class Handoff(BaseModel):
    """A handoff target declared by an agent."""

    label: str = ""
    agent: str = ""


class ResourceRecord(BaseModel):
    """Fields common to every resource kind."""

    id: str
    title: str
    description: str = ""
    path: str  # Repository-relative, forward slashes
    last_updated: Optional[str] = Field(alias="lastUpdated", default=None)

    model_config = {"populate_by_name": True}

    def to_item(self) -> dict[str, Any]:
        """JSON-ready dict in the website data shape."""
        return self.model_dump(mode="json", by_alias=True, exclude={"kind"})


class AgentRecord(ResourceRecord):
    kind: Literal["agent"] = "agent"
    model: Optional[str] = None
    tools: list[str] = Field(default_factory=list)
    has_handoffs: bool = Field(alias="hasHandoffs", default=False)
    handoffs: list[Handoff] = Field(default_factory=list)
    mcp_servers: list[str] = Field(alias="mcpServers", default_factory=list)
    mcp_server_configs: list[McpServerConfig] = Field(default_factory=list, exclude=True)
    filename: str = ""


class PromptRecord(ResourceRecord):
    kind: Literal["prompt"] = "prompt"
    agent: Optional[str] = None
    model: Optional[str] = None
    tools: list[str] = Field(default_factory=list)
    filename: str = ""


class InstructionRecord(ResourceRecord):
    kind: Literal["instruction"] = "instruction"
    apply_to: Optional[Union[str, list[Any]]] = Field(alias="applyTo", default=None)
    apply_to_patterns: list[str] = Field(alias="applyToPatterns", default_factory=list)
    extensions: list[str] = Field(default_factory=list)
    filename: str = ""


class SkillRecord(ResourceRecord):
    kind: Literal["skill"] = "skill"
    name: str
    assets: list[str] = Field(default_factory=list)
    has_assets: bool = Field(alias="hasAssets", default=False)
    asset_count: int = Field(alias="assetCount", default=0)
    category: str = "Other"
    skill_file: str = Field(alias="skillFile")
    files: list[dict[str, Any]] = Field(default_factory=list)


class HookRecord(ResourceRecord):
    kind: Literal["hook"] = "hook"
    name: str
    hooks: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    assets: list[str] = Field(default_factory=list)
    readme_file: str = Field(alias="readmeFile")


class WorkflowRecord(ResourceRecord):
    kind: Literal["workflow"] = "workflow"
    name: str
    triggers: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


AnyResourceRecord = Union[
    AgentRecord,
    PromptRecord,
    InstructionRecord,
    SkillRecord,
    HookRecord,
    WorkflowRecord,
]
