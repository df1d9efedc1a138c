"""Connection graph: which customer segments each canvas entity serves.

Every entity ends up with an ordered tuple of customer-segment ids; the
renderer colors stickies from it. Propagation runs in fixed stages:

    segments -> fits/channels/relationships (direct)
             -> value propositions (via the fits that name them)
             -> revenue streams/resources/activities (via propositions)
             -> partnerships/costs (via resources and activities)

References that resolve to nothing are skipped and reported as
DanglingReference diagnostics; they never fail the build.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from bmml.loader import coerce_document
from bmml.models import Document, Entity, EntityKind

logger = logging.getLogger(__name__)

CS = EntityKind.CUSTOMER_SEGMENT
VP = EntityKind.VALUE_PROPOSITION


class Relation(NamedTuple):
    bundle: str  # entity attribute: "for_" or "from_"
    field: str
    target: EntityKind
    propagates: bool = True  # whether target segments flow into the source

    @property
    def path(self) -> str:
        return f"{self.bundle.rstrip('_')}.{self.field}"


FIT_PROPOSITIONS = Relation("for_", "value_propositions", VP, propagates=False)

# Outgoing references per kind. Must name every EntityKind.
RELATIONS: dict[EntityKind, tuple[Relation, ...]] = {
    CS: (),
    VP: (),
    EntityKind.FIT: (
        Relation("for_", "customer_segments", CS),
        FIT_PROPOSITIONS,
    ),
    EntityKind.CHANNEL: (
        Relation("for_", "customer_segments", CS),
        Relation("for_", "value_propositions", VP, propagates=False),
    ),
    EntityKind.CUSTOMER_RELATIONSHIP: (
        Relation("for_", "customer_segments", CS),
    ),
    EntityKind.REVENUE_STREAM: (
        Relation("from_", "customer_segments", CS),
        Relation("for_", "value_propositions", VP),
    ),
    EntityKind.KEY_RESOURCE: (
        Relation("for_", "value_propositions", VP),
    ),
    EntityKind.KEY_ACTIVITY: (
        Relation("for_", "value_propositions", VP),
    ),
    EntityKind.KEY_PARTNERSHIP: (
        Relation("for_", "key_resources", EntityKind.KEY_RESOURCE),
        Relation("for_", "key_activities", EntityKind.KEY_ACTIVITY),
    ),
    EntityKind.COST: (
        Relation("for_", "key_resources", EntityKind.KEY_RESOURCE),
        Relation("for_", "key_activities", EntityKind.KEY_ACTIVITY),
    ),
}

# Incoming references a kind inherits segments through: (source kind, relation).
INHERITS: dict[EntityKind, tuple[tuple[EntityKind, Relation], ...]] = {
    VP: ((EntityKind.FIT, FIT_PROPOSITIONS),),
}

# Each stage reads only sets completed by earlier stages.
STAGES: tuple[tuple[EntityKind, ...], ...] = (
    (CS,),
    (EntityKind.FIT, EntityKind.CHANNEL, EntityKind.CUSTOMER_RELATIONSHIP),
    (VP,),
    (EntityKind.REVENUE_STREAM, EntityKind.KEY_RESOURCE, EntityKind.KEY_ACTIVITY),
    (EntityKind.KEY_PARTNERSHIP, EntityKind.COST),
)


def _check_tables() -> None:
    """Fail at import if a kind is missing from the tables or read too early."""
    missing = set(EntityKind) - set(RELATIONS)
    if missing:
        raise RuntimeError(f"RELATIONS has no entry for {sorted(k.value for k in missing)}")
    staged = [kind for stage in STAGES for kind in stage]
    if sorted(staged) != sorted(EntityKind):
        raise RuntimeError("STAGES must list every EntityKind exactly once")
    done: set[EntityKind] = set()
    for stage in STAGES:
        for kind in stage:
            reads = [r.target for r in RELATIONS[kind] if r.propagates]
            reads += [source for source, _ in INHERITS.get(kind, ())]
            early = [k.value for k in reads if k not in done]
            if early:
                raise RuntimeError(f"{kind.value} reads {early} before they are computed")
        done.update(stage)


_check_tables()


# --- Results ---


@dataclass(frozen=True)
class DanglingReference:
    """A relation field value that names no entity of the expected kind."""
    source_id: str
    field: str
    target_id: str
    target_kind: EntityKind

    def __str__(self) -> str:
        return (
            f"{self.source_id}: {self.field} references unknown "
            f"{self.target_kind.value} '{self.target_id}'"
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "source": self.source_id,
            "field": self.field,
            "target": self.target_id,
            "target_kind": self.target_kind.value,
        }


@dataclass
class ConnectionGraph:
    """Entity id -> connected customer segments, in segment declaration order."""
    connections: dict[str, tuple[str, ...]]
    segment_order: list[str]
    dangling: list[DanglingReference] = field(default_factory=list)

    def segments_for(self, entity_id: str) -> tuple[str, ...]:
        return self.connections.get(entity_id, ())

    def is_orphaned(self, entity_id: str) -> bool:
        return not self.segments_for(entity_id)

    def segment_index(self, segment_id: str) -> int | None:
        try:
            return self.segment_order.index(segment_id)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, list[str]]:
        return {entity_id: list(segs) for entity_id, segs in self.connections.items()}


# --- Building ---


def segment_order(document: Document) -> list[str]:
    """Customer segment ids in declaration order (first occurrence wins)."""
    return list(dict.fromkeys(cs.id for cs in document.customer_segments))


def _targets(entity: Entity, relation: Relation) -> list[str]:
    return list(getattr(getattr(entity, relation.bundle), relation.field))


def _index(document: Document) -> dict[EntityKind, dict[str, Entity]]:
    index: dict[EntityKind, dict[str, Entity]] = {}
    for kind in EntityKind:
        index[kind] = {}
        for entity in document.entities(kind):
            index[kind].setdefault(entity.id, entity)
    return index


def find_dangling_references(
    document: Document,
    index: dict[EntityKind, dict[str, Entity]] | None = None,
) -> list[DanglingReference]:
    """All references that do not resolve within their target kind."""
    if index is None:
        index = _index(document)
    found: list[DanglingReference] = []
    for entity in document.all_entities():
        for relation in RELATIONS[entity.kind]:
            for target_id in _targets(entity, relation):
                if target_id not in index[relation.target]:
                    found.append(DanglingReference(
                        source_id=entity.id,
                        field=relation.path,
                        target_id=target_id,
                        target_kind=relation.target,
                    ))
    return found


def build_connection_graph(document: Document | Any) -> ConnectionGraph:
    """Compute the connected customer segments of every entity in the document.

    Raises StructuralError if document is not a Document and does not
    validate as one. Dangling references never raise.
    """
    doc = coerce_document(document)
    index = _index(doc)
    order = segment_order(doc)
    rank = {segment_id: i for i, segment_id in enumerate(order)}

    # (kind, id) -> ordered set of segment ids
    found: dict[tuple[EntityKind, str], dict[str, None]] = {}

    for stage in STAGES:
        for kind in stage:
            inherited = _inherited_segments(doc, kind, index, found)
            for entity in doc.entities(kind):
                if index[kind][entity.id] is not entity:
                    continue  # duplicate id; the first declaration wins
                segments = found.setdefault((kind, entity.id), {})
                if kind is CS:
                    segments[entity.id] = None
                    continue
                for relation in RELATIONS[kind]:
                    if not relation.propagates:
                        continue
                    for target_id in _targets(entity, relation):
                        if target_id in index[relation.target]:
                            segments.update(found.get((relation.target, target_id), {}))
                segments.update(inherited.get(entity.id, {}))

    connections: dict[str, tuple[str, ...]] = {}
    for entity in doc.all_entities():
        segments = found[(entity.kind, entity.id)]
        connections.setdefault(entity.id, tuple(sorted(segments, key=rank.__getitem__)))

    dangling = find_dangling_references(doc, index)
    for ref in dangling:
        logger.debug("Dangling reference skipped: %s", ref)

    orphans = sum(1 for segs in connections.values() if not segs)
    logger.debug(
        "Connection graph for %s: %d entities, %d segments, %d orphaned, %d dangling",
        doc.meta.name, len(connections), len(order), orphans, len(dangling),
    )
    return ConnectionGraph(connections=connections, segment_order=order, dangling=dangling)


def _inherited_segments(
    doc: Document,
    kind: EntityKind,
    index: dict[EntityKind, dict[str, Entity]],
    found: dict[tuple[EntityKind, str], dict[str, None]],
) -> dict[str, dict[str, None]]:
    """Segments flowing into entities of `kind` from entities that reference them."""
    inherited: dict[str, dict[str, None]] = {}
    for source_kind, relation in INHERITS.get(kind, ()):
        for source in doc.entities(source_kind):
            if index[source_kind][source.id] is not source:
                continue
            source_segments = found.get((source_kind, source.id), {})
            for target_id in _targets(source, relation):
                if target_id in index[kind]:
                    inherited.setdefault(target_id, {}).update(source_segments)
    return inherited
