"""
Plugin models.

Plugins live under plugins/{name}/ and describe themselves in
.github/plugin/plugin.json:

  {name, description, version, keywords[], agents[], commands[], skills[],
   author, repository, license, featured}

agents/commands/skills hold path references into the plugin folder
(./agents/x.md, ./commands/y.md, ./skills/z/) that resolve to repository
sources (agents/x.agent.md, prompts/y.prompt.md, skills/z/SKILL.md).
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


def _string_items(value: Any) -> list[str]:
    """String entries of a JSON array; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class PluginDescriptor(BaseModel):
    """Contents of .github/plugin/plugin.json, read leniently."""

    name: str = ""
    description: str = ""
    version: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    author: Any = None
    repository: Any = None  # String or npm-style {type, url}
    license: Any = None
    featured: bool = False

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _coerce_fields(cls, data: Any) -> Any:
        """Map mistyped or null fields to defaults; strictness belongs to validation.

        Older descriptors carry ``tags`` instead of ``keywords``.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("name", "description"):
            if not isinstance(data.get(key), str):
                data[key] = ""
        if not isinstance(data.get("version"), str):
            data["version"] = None
        keywords = data.get("keywords")
        data["keywords"] = _string_items(data.get("tags") if keywords is None else keywords)
        for key in ("agents", "commands", "skills"):
            data[key] = _string_items(data.get(key))
        data["featured"] = data.get("featured") is True
        return data

    @property
    def item_count(self) -> int:
        return len(self.agents) + len(self.commands) + len(self.skills)


class PluginValidationResult(BaseModel):
    """Every rule violation found for one plugin folder."""

    plugin: str  # Folder name
    errors: list[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class PluginValidationReport(BaseModel):
    """Validation outcome for a whole scan."""

    results: list[PluginValidationResult] = Field(default_factory=list)
    duplicates: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.duplicates and all(r.valid for r in self.results)

    @property
    def failed(self) -> list[PluginValidationResult]:
        return [r for r in self.results if not r.valid]
