"""Platform enumeration and the per-platform credential variants.

``PlatformConfig`` is a closed union discriminated by the ``platform`` tag.
Field names are snake_case in Python and camelCase on the wire (stored
records, cookie names, gateway payloads) via pydantic aliases.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agilow.errors import ConfigParseError


class Platform(str, Enum):
    """Supported project-management providers."""

    TRELLO = "trello"
    LINEAR = "linear"
    ASANA = "asana"
    NOTION = "notion"  # coming soon, no config variant

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def supports_discovery(self) -> bool:
        return self is Platform.TRELLO

    @classmethod
    def parse(cls, value: Any) -> Optional["Platform"]:
        """Best-effort conversion of a stored tag; unknown tags map to None."""
        if isinstance(value, Platform):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class PlatformConfigBase(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def credential_fields(self) -> Dict[str, str]:
        """Wire-named credential fields, without the discriminator."""
        return self.model_dump(by_alias=True, exclude={"platform"})

    def is_complete(self) -> bool:
        return all(
            isinstance(value, str) and value.strip()
            for value in self.credential_fields().values()
        )

    def to_record(self) -> str:
        """Encode as the JSON record stored in the durable tier."""
        return json.dumps(self.credential_fields())


class TrelloConfig(PlatformConfigBase):
    platform: Literal[Platform.TRELLO] = Platform.TRELLO
    api_key: str = Field(default="", alias="apiKey")
    token: str = ""
    board_id: str = Field(default="", alias="boardId")


class LinearConfig(PlatformConfigBase):
    platform: Literal[Platform.LINEAR] = Platform.LINEAR
    api_key: str = Field(default="", alias="apiKey")
    workspace_id: str = Field(default="", alias="workspaceId")


class AsanaConfig(PlatformConfigBase):
    platform: Literal[Platform.ASANA] = Platform.ASANA
    personal_access_token: str = Field(default="", alias="personalAccessToken")
    project_id: str = Field(default="", alias="projectId")


PlatformConfig = Annotated[
    Union[TrelloConfig, LinearConfig, AsanaConfig],
    Field(discriminator="platform"),
]

CONFIG_TYPES: Dict[Platform, Type[PlatformConfigBase]] = {
    Platform.TRELLO: TrelloConfig,
    Platform.LINEAR: LinearConfig,
    Platform.ASANA: AsanaConfig,
}

# Platforms whose whole config is kept as one record in the durable tier,
# in the order the resolver consults them.
DURABLE_PLATFORMS: Tuple[Platform, ...] = (Platform.LINEAR, Platform.ASANA)


@dataclass(frozen=True)
class FieldSpec:
    """Form descriptor for one credential field."""

    name: str
    label: str
    placeholder: str
    secret: bool = False


PLATFORM_FIELDS: Dict[Platform, Tuple[FieldSpec, ...]] = {
    Platform.TRELLO: (
        FieldSpec("apiKey", "Trello API Key", "Enter your Trello API Key", secret=True),
        FieldSpec("token", "Trello Token", "Enter your Trello Token", secret=True),
        FieldSpec("boardId", "Board ID", "Enter your Trello Board ID"),
    ),
    Platform.LINEAR: (
        FieldSpec("apiKey", "Linear API Key", "Enter your Linear API key", secret=True),
        FieldSpec("workspaceId", "Workspace ID", "Enter your Linear workspace ID"),
    ),
    Platform.ASANA: (
        FieldSpec(
            "personalAccessToken",
            "Personal Access Token",
            "Enter your Asana personal access token",
            secret=True,
        ),
        FieldSpec("projectId", "Project ID", "Enter your Asana project ID"),
    ),
    Platform.NOTION: (),
}


def has_config_variant(platform: Optional[Platform]) -> bool:
    return platform in CONFIG_TYPES


def config_from_fields(platform: Platform, values: Mapping[str, Any]):
    """Build the variant for ``platform`` from wire- or python-named fields.

    Raises ConfigParseError when the platform has no variant or the values do
    not validate (e.g. a non-string field).
    """
    config_type = CONFIG_TYPES.get(platform)
    if config_type is None:
        raise ConfigParseError(f"{platform.display_name} has no configuration variant")
    data = {k: v for k, v in dict(values).items() if k != "platform"}
    try:
        return config_type.model_validate(data)
    except ValidationError as exc:
        raise ConfigParseError(
            f"Invalid {platform.display_name} configuration: {exc.error_count()} error(s)"
        ) from exc


def parse_config_record(platform: Platform, raw: str):
    """Decode a durable-tier JSON record into the platform's variant."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigParseError(f"Stored {platform.display_name} config is not JSON") from exc
    if not isinstance(data, dict):
        raise ConfigParseError(f"Stored {platform.display_name} config is not an object")
    return config_from_fields(platform, data)


def missing_fields(platform: Platform, values: Mapping[str, Any]) -> List[str]:
    """Return the labels of required fields that are absent or blank."""
    missing = []
    for spec in PLATFORM_FIELDS.get(platform, ()):
        value = values.get(spec.name)
        if not isinstance(value, str) or not value.strip():
            missing.append(spec.label)
    return missing
