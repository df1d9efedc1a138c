"""Pydantic models for BMML v2 business model documents."""

from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EntityKind(str, Enum):
    CUSTOMER_SEGMENT = "customer_segment"
    VALUE_PROPOSITION = "value_proposition"
    FIT = "fit"
    CHANNEL = "channel"
    CUSTOMER_RELATIONSHIP = "customer_relationship"
    REVENUE_STREAM = "revenue_stream"
    KEY_RESOURCE = "key_resource"
    KEY_ACTIVITY = "key_activity"
    KEY_PARTNERSHIP = "key_partnership"
    COST = "cost"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def collection(self) -> str:
        """Name of the Document field holding entities of this kind."""
        return _COLLECTIONS[self]

    @classmethod
    def from_id(cls, entity_id: str) -> "EntityKind | None":
        """Kind named by an identifier's prefix, or None if no kind matches."""
        head = entity_id.split("-", 1)[0]
        return _BY_PREFIX.get(head)


_PREFIXES: dict[EntityKind, str] = {
    EntityKind.CUSTOMER_SEGMENT: "cs",
    EntityKind.VALUE_PROPOSITION: "vp",
    EntityKind.FIT: "fit",
    EntityKind.CHANNEL: "ch",
    EntityKind.CUSTOMER_RELATIONSHIP: "cr",
    EntityKind.REVENUE_STREAM: "rs",
    EntityKind.KEY_RESOURCE: "kr",
    EntityKind.KEY_ACTIVITY: "ka",
    EntityKind.KEY_PARTNERSHIP: "kp",
    EntityKind.COST: "cost",
}

_COLLECTIONS: dict[EntityKind, str] = {
    EntityKind.CUSTOMER_SEGMENT: "customer_segments",
    EntityKind.VALUE_PROPOSITION: "value_propositions",
    EntityKind.FIT: "fits",
    EntityKind.CHANNEL: "channels",
    EntityKind.CUSTOMER_RELATIONSHIP: "customer_relationships",
    EntityKind.REVENUE_STREAM: "revenue_streams",
    EntityKind.KEY_RESOURCE: "key_resources",
    EntityKind.KEY_ACTIVITY: "key_activities",
    EntityKind.KEY_PARTNERSHIP: "key_partnerships",
    EntityKind.COST: "costs",
}

_BY_PREFIX = {prefix: kind for kind, prefix in _PREFIXES.items()}


class StructuralError(ValueError):
    """The input is not a well-formed BMML v2 document."""

    def __init__(self, message: str, errors: list[tuple[str, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def _without_nulls(data: Any) -> Any:
    """YAML leaves empty keys as null; treat them as absent."""
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if v is not None}
    return data


# --- Meta ---


class Meta(BaseModel):
    name: str
    tagline: str | None = None
    created: str | None = None
    updated: str | None = None
    portfolio: Literal["explore", "exploit"] | None = None
    stage: str | None = None
    derived_from: str | None = None

    @field_validator("created", "updated", mode="before")
    @classmethod
    def date_to_str(cls, value: Any) -> Any:
        # Unquoted YAML dates arrive as date objects
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value


# --- Relation bundles ---


class ForRelation(BaseModel):
    """Which entities something serves or supports."""
    value_propositions: list[str] = Field(default_factory=list)
    customer_segments: list[str] = Field(default_factory=list)
    key_resources: list[str] = Field(default_factory=list)
    key_activities: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        return _without_nulls(data)


class FromRelation(BaseModel):
    """Which entities something comes from."""
    customer_segments: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        return _without_nulls(data)


# --- Profile items (carried, not drawn) ---


class ProfileItem(BaseModel):
    id: str
    description: str | None = None


class NamedItem(BaseModel):
    id: str
    name: str | None = None


# --- Entities ---


class Entity(BaseModel):
    """Common shape of every canvas entity."""
    model_config = ConfigDict(populate_by_name=True)

    kind: ClassVar[EntityKind]
    id: str
    name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        return _without_nulls(data)

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or self.id


class CustomerSegment(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOMER_SEGMENT
    description: str | None = None
    jobs: list[ProfileItem] = Field(default_factory=list)
    pains: list[ProfileItem] = Field(default_factory=list)
    gains: list[ProfileItem] = Field(default_factory=list)


class ValueProposition(Entity):
    kind: ClassVar[EntityKind] = EntityKind.VALUE_PROPOSITION
    description: str | None = None
    products_services: list[NamedItem] = Field(default_factory=list)
    pain_relievers: list[NamedItem] = Field(default_factory=list)
    gain_creators: list[NamedItem] = Field(default_factory=list)


class Fit(Entity):
    kind: ClassVar[EntityKind] = EntityKind.FIT
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")
    mappings: list[tuple[str, str]] = Field(default_factory=list)


class Channel(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CHANNEL
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class CustomerRelationship(Entity):
    kind: ClassVar[EntityKind] = EntityKind.CUSTOMER_RELATIONSHIP
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class RevenueStream(Entity):
    kind: ClassVar[EntityKind] = EntityKind.REVENUE_STREAM
    from_: FromRelation = Field(default_factory=FromRelation, alias="from")
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class KeyResource(Entity):
    kind: ClassVar[EntityKind] = EntityKind.KEY_RESOURCE
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class KeyActivity(Entity):
    kind: ClassVar[EntityKind] = EntityKind.KEY_ACTIVITY
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class KeyPartnership(Entity):
    kind: ClassVar[EntityKind] = EntityKind.KEY_PARTNERSHIP
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


class Cost(Entity):
    kind: ClassVar[EntityKind] = EntityKind.COST
    for_: ForRelation = Field(default_factory=ForRelation, alias="for")


# --- Root document ---


class Document(BaseModel):
    """A complete BMML v2 document, already normalised to the current shape."""
    model_config = ConfigDict(frozen=True)

    version: Literal["2.0"]
    meta: Meta
    customer_segments: list[CustomerSegment] = Field(default_factory=list)
    value_propositions: list[ValueProposition] = Field(default_factory=list)
    fits: list[Fit] = Field(default_factory=list)
    channels: list[Channel] = Field(default_factory=list)
    customer_relationships: list[CustomerRelationship] = Field(default_factory=list)
    revenue_streams: list[RevenueStream] = Field(default_factory=list)
    key_resources: list[KeyResource] = Field(default_factory=list)
    key_activities: list[KeyActivity] = Field(default_factory=list)
    key_partnerships: list[KeyPartnership] = Field(default_factory=list)
    costs: list[Cost] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalise_root(cls, data: Any) -> Any:
        data = _without_nulls(data)
        # An unquoted YAML `version: 2.0` arrives as a float
        if isinstance(data, dict) and isinstance(data.get("version"), float):
            data = {**data, "version": str(data["version"])}
        return data

    def entities(self, kind: EntityKind) -> list[Entity]:
        return list(getattr(self, kind.collection))

    def all_entities(self) -> list[Entity]:
        """Every entity, in EntityKind order then declaration order."""
        result: list[Entity] = []
        for kind in EntityKind:
            result.extend(self.entities(kind))
        return result
