"""
Pydantic models for resource records, plugins and the MCP registry.
"""

from resource_catalog.models.plugin import (
    PluginDescriptor,
    PluginValidationReport,
    PluginValidationResult,
)
from resource_catalog.models.registry import RegistryCatalog, RegistryEntry
from resource_catalog.models.resources import (
    AgentRecord,
    AnyResourceRecord,
    HookEvent,
    HookRecord,
    InstructionRecord,
    McpServerConfig,
    PromptRecord,
    ResourceKind,
    SkillRecord,
    WorkflowRecord,
)

__all__ = [
    # Resources
    "AgentRecord",
    "AnyResourceRecord",
    "HookEvent",
    "HookRecord",
    "InstructionRecord",
    "McpServerConfig",
    "PromptRecord",
    "ResourceKind",
    "SkillRecord",
    "WorkflowRecord",
    # Plugins
    "PluginDescriptor",
    "PluginValidationReport",
    "PluginValidationResult",
    # Registry
    "RegistryCatalog",
    "RegistryEntry",
]
