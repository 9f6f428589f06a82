"""
Functional dependency normalization engine.

Pure, synchronous algorithms over relation snapshots: attribute closures,
candidate keys, canonical covers, normal-form classification (2NF/3NF/BCNF)
and decomposition into 2NF (partial-dependency removal) or 3NF (synthesis).

Nothing in this module performs I/O or mutates a caller-supplied relation.
Every algorithm that needs to experiment works on private working sets and
returns new values. Step traces are emitted on the module logger at DEBUG
level so that analysts can follow how a decomposition was derived.

Candidate-key enumeration walks the full power set of a relation's columns and
is therefore exponential in the number of attributes. The engine applies no
cap of its own; callers that need bounded latency must impose one (see
``check_complexity``).
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from enum import IntEnum
from itertools import combinations, permutations
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

logger = logging.getLogger(__name__)

AttributeSet = FrozenSet[str]

# Catalog id of a dependency that has not been persisted yet.
UNSAVED_ID = -1

_ATTRIBUTE_SEPARATOR_RE = re.compile(r"[,\s]+")


# --------------------------------------------------------------------------------------
# Errors
# --------------------------------------------------------------------------------------
class NormalizationError(Exception):
    """Base class for every error raised by the normalization engine."""


class InvalidRelation(NormalizationError):
    """The relation snapshot violates a structural precondition."""


class DegenerateFd(InvalidRelation):
    """A dependency with an empty left- or right-hand side reached an algorithm that cannot accept it."""


class ComplexityExceeded(NormalizationError):
    """Advisory raised by callers that cap the number of attributes they analyse."""


# --------------------------------------------------------------------------------------
# Attribute / FD model
# --------------------------------------------------------------------------------------
def attribute_set(attrs: Iterable[str]) -> AttributeSet:
    # A bare string names one attribute, not a sequence of one-letter attributes.
    if isinstance(attrs, str):
        return frozenset([attrs])
    return frozenset(attrs)


def ordered(attrs: Iterable[str]) -> Tuple[str, ...]:
    """Deterministic iteration order of an attribute set (lexicographic)."""
    return tuple(sorted(attrs))


def parse_attributes(text: str) -> AttributeSet:
    return frozenset(a for a in _ATTRIBUTE_SEPARATOR_RE.split(text.strip()) if a)


@dataclass(frozen=True)
class FunctionalDependency:
    lhs: AttributeSet
    rhs: AttributeSet
    is_key: bool = field(default=False, compare=False)
    catalog_id: int = field(default=UNSAVED_ID, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lhs", attribute_set(self.lhs))
        object.__setattr__(self, "rhs", attribute_set(self.rhs))

    @classmethod
    def parse(cls, text: str, is_key: bool = False, catalog_id: int = UNSAVED_ID) -> "FunctionalDependency":
        """Parse ``"A, B -> C"`` (commas or whitespace separate attributes)."""
        parts = text.split("->")
        if len(parts) != 2:
            raise ValueError(f"Cannot parse {text!r} into a functional dependency")
        return cls(parse_attributes(parts[0]), parse_attributes(parts[1]), is_key=is_key, catalog_id=catalog_id)

    @property
    def sort_key(self) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        return ordered(self.lhs), ordered(self.rhs)

    def __lt__(self, other: "FunctionalDependency") -> bool:
        if not isinstance(other, FunctionalDependency):
            return NotImplemented
        return self.sort_key < other.sort_key

    @property
    def attributes(self) -> AttributeSet:
        return self.lhs | self.rhs

    @property
    def is_trivial(self) -> bool:
        return self.rhs <= self.lhs

    def split(self) -> List["FunctionalDependency"]:
        """Single right-hand-side attribute form of this dependency."""
        return [FunctionalDependency(self.lhs, frozenset([b])) for b in ordered(self.rhs)]

    def __str__(self) -> str:
        return f"{' '.join(ordered(self.lhs))} -> {' '.join(ordered(self.rhs))}"


FD = FunctionalDependency


def decompose_rhs(fds: Iterable[FunctionalDependency]) -> List[FunctionalDependency]:
    """Split every dependency into single-attribute right-hand sides, deduplicated and sorted."""
    return sorted({single for fd in fds for single in fd.split()})


def compose_lhs(fds: Iterable[FunctionalDependency]) -> List[FunctionalDependency]:
    """Merge dependencies that share an identical left-hand side."""
    merged: Dict[AttributeSet, Set[str]] = {}
    flags: Dict[AttributeSet, bool] = {}
    for fd in sorted(fds):
        merged.setdefault(fd.lhs, set()).update(fd.rhs)
        flags[fd.lhs] = flags.get(fd.lhs, False) or fd.is_key
    return sorted(FunctionalDependency(lhs, rhs, is_key=flags[lhs]) for lhs, rhs in merged.items())


@dataclass(frozen=True)
class Relation:
    """Immutable relation snapshot with its committed dependencies and preview overlays."""

    name: str
    columns: AttributeSet
    fds: Tuple[FunctionalDependency, ...] = ()
    additional_fds: Tuple[FunctionalDependency, ...] = ()
    removed_fds: Tuple[FunctionalDependency, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", attribute_set(self.columns))
        object.__setattr__(self, "fds", tuple(sorted(set(self.fds))))
        # Overlays keep insertion order, the order in which edits were proposed.
        object.__setattr__(self, "additional_fds", tuple(dict.fromkeys(self.additional_fds)))
        object.__setattr__(self, "removed_fds", tuple(dict.fromkeys(self.removed_fds)))

    @classmethod
    def from_strings(cls, name: str, columns: Iterable[str], fds: Iterable[str] = ()) -> "Relation":
        return cls(name=name, columns=frozenset(columns), fds=tuple(FunctionalDependency.parse(f) for f in fds))

    def effective_fds(self, preview: bool = False) -> Tuple[FunctionalDependency, ...]:
        """Committed dependencies, or ``fds ∪ additional_fds \\ removed_fds`` when previewing.

        Removal matches by catalog id for persisted dependencies; only unsaved
        dependencies are matched by value. A persisted dependency staged for
        removal and re-added as a new one therefore stays in the preview.
        """
        if not preview:
            return self.fds
        removed_ids = {fd.catalog_id for fd in self.removed_fds if fd.catalog_id != UNSAVED_ID}
        removed_unsaved = {fd for fd in self.removed_fds if fd.catalog_id == UNSAVED_ID}

        def kept(fd: FunctionalDependency) -> bool:
            if fd.catalog_id != UNSAVED_ID:
                return fd.catalog_id not in removed_ids
            return fd not in removed_unsaved

        combined = dict.fromkeys(fd for fd in self.fds + self.additional_fds if kept(fd))
        return tuple(sorted(combined))

    def preview(self) -> "Relation":
        return replace(self, fds=self.effective_fds(preview=True), additional_fds=(), removed_fds=())

    def with_additional_fd(self, fd: FunctionalDependency) -> "Relation":
        return replace(self, additional_fds=self.additional_fds + (fd,))

    def with_removed_fd(self, fd: FunctionalDependency) -> "Relation":
        return replace(self, removed_fds=self.removed_fds + (fd,))

    def discard_overlays(self) -> "Relation":
        return replace(self, additional_fds=(), removed_fds=())

    @property
    def has_overlays(self) -> bool:
        return bool(self.additional_fds or self.removed_fds)


@dataclass(frozen=True)
class DerivedRelation(Relation):
    """A relation produced by decomposition."""

    origin_fd: Optional[FunctionalDependency] = None
    origin_name: str = ""


def validate_relation(relation: Relation, allow_empty_rhs: bool = True) -> None:
    """Reject structurally invalid snapshots before any algorithm runs.

    An empty left-hand side would make its right-hand side a constant of the
    relation, which the engine does not model, so it is always rejected.
    """
    if not relation.columns:
        raise InvalidRelation(f"Relation {relation.name!r} has no attributes")
    for fd in relation.fds:
        if not fd.lhs:
            raise DegenerateFd(f"Dependency '{fd}' of {relation.name!r} has an empty left-hand side")
        if not fd.rhs and not allow_empty_rhs:
            raise DegenerateFd(f"Dependency '{fd}' of {relation.name!r} has an empty right-hand side")
        outside = fd.attributes - relation.columns
        if outside:
            raise InvalidRelation(
                f"Dependency '{fd}' of {relation.name!r} references unknown attributes {list(ordered(outside))}"
            )


def check_complexity(relation: Relation, max_attributes: int) -> None:
    if len(relation.columns) > max_attributes:
        raise ComplexityExceeded(
            f"Relation {relation.name!r} has {len(relation.columns)} attributes; "
            f"key enumeration is capped at {max_attributes}"
        )


# --------------------------------------------------------------------------------------
# Closure engine
# --------------------------------------------------------------------------------------
def closure(attrs: Iterable[str], fds: Iterable[FunctionalDependency]) -> AttributeSet:
    """Attribute closure of ``attrs`` under ``fds``.

    Repeats full passes over the dependencies, adding the right-hand side of
    every dependency whose left-hand side is already covered, until a pass
    adds nothing. Terminates after at most ``|attributes|`` productive passes.
    """
    fds = list(fds)
    result = set(attrs)
    changed = True
    while changed:
        changed = False
        for fd in fds:
            if fd.lhs <= result and not fd.rhs <= result:
                result |= fd.rhs
                changed = True
    return frozenset(result)


def is_key(candidate: Iterable[str], relation: Relation) -> bool:
    """True when ``candidate`` determines every column (a superkey, not necessarily minimal)."""
    return closure(candidate, relation.fds) >= relation.columns


def is_implied(fd: FunctionalDependency, relation: Relation) -> bool:
    return fd.rhs <= closure(fd.lhs, relation.fds)


# --------------------------------------------------------------------------------------
# Candidate keys
# --------------------------------------------------------------------------------------
def powerset(attrs: Iterable[str]) -> Iterator[AttributeSet]:
    """All subsets, the empty one included, by size then lexicographically."""
    items = ordered(attrs)
    for size in range(len(items) + 1):
        for combo in combinations(items, size):
            yield frozenset(combo)


def candidate_keys(relation: Relation) -> List[AttributeSet]:
    """Every minimal attribute set whose closure covers all columns.

    Tests each of the ``2 ** len(columns)`` subsets, so the cost is
    exponential in the number of attributes. Results are never truncated;
    keep the input bounded. Keys are returned in enumeration order.
    """
    validate_relation(relation)
    keys: List[AttributeSet] = []
    for subset in powerset(relation.columns):
        if not is_key(subset, relation):
            continue
        if any(is_key(subset - {a}, relation) for a in ordered(subset)):
            continue
        keys.append(subset)
    return keys


def prime_attributes(relation: Relation, keys: Optional[Sequence[AttributeSet]] = None) -> AttributeSet:
    if keys is None:
        keys = candidate_keys(relation)
    return frozenset().union(*keys)


def non_key_attributes(relation: Relation, keys: Optional[Sequence[AttributeSet]] = None) -> AttributeSet:
    return relation.columns - prime_attributes(relation, keys)


# --------------------------------------------------------------------------------------
# Canonical cover
# --------------------------------------------------------------------------------------
_Working = List[Tuple[Set[str], Set[str]]]


def _as_fds(working: _Working) -> List[FunctionalDependency]:
    return [FunctionalDependency(lhs, rhs) for lhs, rhs in working]


def _snapshot(working: _Working) -> List[Tuple[Tuple[str, ...], Tuple[str, ...]]]:
    return sorted((ordered(lhs), ordered(rhs)) for lhs, rhs in working)


def _reduce_lhs(working: _Working) -> None:
    for lhs, rhs in working:
        if not rhs:
            continue
        for attr in ordered(lhs):
            if rhs <= closure(lhs - {attr}, _as_fds(working)):
                lhs.discard(attr)


def _reduce_rhs(working: _Working) -> None:
    for lhs, rhs in working:
        for attr in ordered(rhs):
            rhs.discard(attr)
            if attr not in closure(lhs, _as_fds(working)):
                rhs.add(attr)


def _merge_by_lhs(working: _Working) -> _Working:
    merged: Dict[AttributeSet, Set[str]] = {}
    for lhs, rhs in working:
        merged.setdefault(frozenset(lhs), set()).update(rhs)
    return [(set(lhs), rhs) for lhs, rhs in merged.items()]


def _reduce(fds: Sequence[FunctionalDependency]) -> List[FunctionalDependency]:
    working: _Working = [(set(fd.lhs), set(fd.rhs)) for fd in fds]
    while True:
        before = _snapshot(working)
        _reduce_lhs(working)
        _reduce_rhs(working)
        working = [(lhs, rhs) for lhs, rhs in working if rhs]
        working = _merge_by_lhs(working)
        if _snapshot(working) == before:
            break
    return sorted(_as_fds(working))


def canonical_cover(relation: Relation) -> List[FunctionalDependency]:
    """Minimal dependency set equivalent to ``relation.fds``.

    Left-hand sides lose extraneous attributes, right-hand sides lose
    attributes derivable from the rest of the working set, emptied
    dependencies are dropped and dependencies sharing a left-hand side are
    merged. The four steps repeat until the set stops changing. Attributes
    and dependencies are visited in their deterministic order, so the result
    is reproducible even though canonical covers are not unique in general.
    """
    validate_relation(relation)
    return _reduce(sorted(relation.fds))


def canonical_covers(relation: Relation) -> List[List[FunctionalDependency]]:
    """Every distinct canonical cover reachable by some processing order of the dependencies.

    Tries all ``len(fds)!`` orders; only practical for small dependency sets.
    """
    validate_relation(relation)
    covers: Dict[Tuple[FunctionalDependency, ...], None] = {}
    for order in permutations(sorted(relation.fds)):
        covers.setdefault(tuple(_reduce(order)), None)
    return [list(cover) for cover in covers]


# --------------------------------------------------------------------------------------
# Normal-form classification
# --------------------------------------------------------------------------------------
class NormalForm(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    BCNF = 4

    @property
    def label(self) -> str:
        return {1: "1NF", 2: "2NF", 3: "3NF", 4: "BCNF"}[self.value]


def second_nf_violations(
    relation: Relation, keys: Optional[Sequence[AttributeSet]] = None
) -> List[FunctionalDependency]:
    """Partial dependencies ``y -> z`` of a non-key attribute on a proper subset of a candidate key."""
    if keys is None:
        keys = candidate_keys(relation)
    non_key = non_key_attributes(relation, keys)
    found: Dict[FunctionalDependency, None] = {}
    for key in keys:
        for removed in ordered(key):
            determinant = key - {removed}
            reachable = closure(determinant, relation.fds)
            for attr in ordered(non_key & reachable):
                found.setdefault(FunctionalDependency(determinant, {attr}), None)
    return list(found)


def third_nf_violations(
    relation: Relation, keys: Optional[Sequence[AttributeSet]] = None
) -> List[FunctionalDependency]:
    """Single-attribute dependencies that are not trivial, not onto a prime attribute and not from a superkey."""
    if keys is None:
        keys = candidate_keys(relation)
    prime = prime_attributes(relation, keys)
    violations = []
    for fd in decompose_rhs(relation.fds):
        if fd.is_trivial:
            continue
        if fd.rhs <= prime:
            continue
        if is_key(fd.lhs, relation):
            continue
        violations.append(fd)
    return violations


def bcnf_violations(
    relation: Relation, keys: Optional[Sequence[AttributeSet]] = None
) -> List[FunctionalDependency]:
    """Non-trivial dependencies whose determinant is not a candidate key."""
    if keys is None:
        keys = candidate_keys(relation)
    key_set = set(keys)
    found: Dict[FunctionalDependency, None] = {}
    for attr in ordered(relation.columns):
        for fd in relation.fds:
            if attr in fd.rhs and attr not in fd.lhs and fd.lhs not in key_set:
                found.setdefault(FunctionalDependency(fd.lhs, {attr}), None)
    return list(found)


def is_2nf(relation: Relation) -> bool:
    validate_relation(relation)
    return not second_nf_violations(relation)


def is_3nf(relation: Relation) -> bool:
    validate_relation(relation)
    return not third_nf_violations(relation)


def is_bcnf(relation: Relation) -> bool:
    validate_relation(relation)
    return not bcnf_violations(relation)


def normal_form(relation: Relation) -> NormalForm:
    """Highest form reached by the chain 2NF -> 3NF -> BCNF; each test guards the next."""
    validate_relation(relation)
    keys = candidate_keys(relation)
    if second_nf_violations(relation, keys):
        return NormalForm.FIRST
    if third_nf_violations(relation, keys):
        return NormalForm.SECOND
    if bcnf_violations(relation, keys):
        return NormalForm.THIRD
    return NormalForm.BCNF


# --------------------------------------------------------------------------------------
# Decomposition
# --------------------------------------------------------------------------------------
def _require_synthesizable(relation: Relation) -> None:
    validate_relation(relation, allow_empty_rhs=False)


def _drop_contained(relations: List[DerivedRelation]) -> List[DerivedRelation]:
    # Of two relations with equal columns the earlier one survives.
    dropped: Set[int] = set()
    for i, outer in enumerate(relations):
        if i in dropped:
            continue
        for j, inner in enumerate(relations):
            if i != j and j not in dropped and inner.columns <= outer.columns:
                logger.debug("%s removed because %s contains it", inner.name, outer.name)
                dropped.add(j)
    return [rel for i, rel in enumerate(relations) if i not in dropped]


def _mark_key_fds(relation: DerivedRelation) -> DerivedRelation:
    marked = tuple(replace(fd, is_key=is_key(fd.lhs, relation)) for fd in relation.fds)
    return replace(relation, fds=marked)


def _distribute(relations: List[DerivedRelation], fds: Sequence[FunctionalDependency]) -> List[DerivedRelation]:
    return [
        replace(rel, fds=tuple(compose_lhs(fd for fd in fds if fd.attributes <= rel.columns)))
        for rel in relations
    ]


def _with_key_origin(relation: DerivedRelation) -> DerivedRelation:
    key = candidate_keys(relation)[0]
    rest = relation.columns - key
    return replace(relation, origin_fd=FunctionalDependency(key, rest or key, is_key=True))


def decompose_2nf(relation: Relation) -> List[DerivedRelation]:
    """Remove partial dependencies on candidate keys.

    For every candidate key ``x`` and every ``y = x \\ {a}``, the non-key
    attributes determined by ``y`` that the retaining relation still holds
    move, together with ``y``, into a new relation carrying ``y -> moved``.
    Relations contained in another are then dropped and the canonical cover
    is redistributed over the survivors.

    A single pass is made over the keys of the input relation. The derived
    relations are not decomposed again, so they are not guaranteed to be in
    2NF themselves: a moved attribute that depends on a smaller part of ``y``
    leaves a partial dependency in the new relation.
    """
    _require_synthesizable(relation)
    keys = candidate_keys(relation)
    non_key = non_key_attributes(relation, keys)
    retained = set(relation.columns)
    splits: List[Tuple[AttributeSet, AttributeSet]] = []
    logger.debug("Initialize relation %s_1 with columns %s", relation.name, list(ordered(retained)))

    for key in keys:
        for removed in ordered(key):
            determinant = key - {removed}
            moved = closure(determinant, relation.fds) & non_key & retained
            if not moved:
                continue
            logger.debug(
                "Non-key attributes %s depend on %s, a proper subset of key %s",
                list(ordered(moved)), list(ordered(determinant)), list(ordered(key)),
            )
            retained -= moved
            splits.append((determinant, frozenset(moved)))

    derived = [DerivedRelation(name=f"{relation.name}_1", columns=frozenset(retained), origin_name=relation.name)]
    for index, (determinant, moved) in enumerate(splits, start=2):
        rel = DerivedRelation(
            name=f"{relation.name}_{index}",
            columns=determinant | moved,
            origin_fd=FunctionalDependency(determinant, moved),
            origin_name=relation.name,
        )
        logger.debug("New relation %s with columns %s created", rel.name, list(ordered(rel.columns)))
        derived.append(rel)

    derived = _drop_contained(derived)
    cover = decompose_rhs(canonical_cover(relation))
    derived = [_mark_key_fds(rel) for rel in _distribute(derived, cover)]
    return [_with_key_origin(rel) if rel.origin_fd is None else rel for rel in derived]


def synthesize_3nf(relation: Relation) -> List[DerivedRelation]:
    """Dependency-preserving, lossless 3NF synthesis.

    One relation per canonical-cover dependency, plus a key relation when no
    synthesized relation holds a candidate key of the original, minus the
    relations contained in another.
    """
    _require_synthesizable(relation)
    cover = canonical_cover(relation)
    logger.debug("Step 1 (canonical cover): %s", [str(fd) for fd in cover])
    split_cover = decompose_rhs(cover)
    keys = candidate_keys(relation)

    derived: List[DerivedRelation] = []
    for index, fd in enumerate(cover, start=1):
        columns = fd.attributes
        rel = DerivedRelation(
            name=f"{relation.name}_{index}",
            columns=columns,
            fds=tuple(compose_lhs(f for f in split_cover if f.attributes <= columns)),
            origin_fd=replace(fd, is_key=True),
            origin_name=relation.name,
        )
        logger.debug("Step 2: relation %s created with columns %s", rel.name, list(ordered(columns)))
        derived.append(_mark_key_fds(rel))

    if not any(key <= rel.columns for key in keys for rel in derived):
        key = keys[0]
        key_fd = FunctionalDependency(key, key, is_key=True)
        rel = DerivedRelation(
            name=f"{relation.name}_{len(cover) + 1}",
            columns=key,
            fds=(key_fd,),
            origin_fd=key_fd,
            origin_name=relation.name,
        )
        logger.debug("Step 3: key relation %s created with columns %s", rel.name, list(ordered(key)))
        derived.append(rel)
    else:
        logger.debug("Step 3: a synthesized relation already holds a candidate key")

    return _drop_contained(derived)


def decompose(relation: Relation, target: NormalForm) -> List[DerivedRelation]:
    if target == NormalForm.SECOND:
        return decompose_2nf(relation)
    if target == NormalForm.THIRD:
        return synthesize_3nf(relation)
    raise ValueError(f"Decomposition into {target.label} is not supported; choose 2NF or 3NF")


# --------------------------------------------------------------------------------------
# Decomposition verification
# --------------------------------------------------------------------------------------
def is_lossless(relation: Relation, derived: Sequence[Relation]) -> bool:
    """Chase test: the natural join of ``derived`` reconstructs ``relation``.

    Builds one tableau row per derived relation (distinguished symbol where
    the relation holds the column, a row-specific one elsewhere) and equates
    symbols along every dependency until nothing changes. Lossless iff some
    row ends up fully distinguished.
    """
    columns = ordered(relation.columns)
    rows = [
        {col: (col if col in rel.columns else f"{col}#{index}") for col in columns}
        for index, rel in enumerate(derived)
    ]
    singles = decompose_rhs(relation.fds)
    changed = True
    while changed:
        changed = False
        for fd in singles:
            (target,) = fd.rhs
            groups: Dict[Tuple[str, ...], Set[str]] = {}
            for row in rows:
                groups.setdefault(tuple(row[a] for a in ordered(fd.lhs)), set()).add(row[target])
            for symbols in groups.values():
                if len(symbols) < 2:
                    continue
                chosen = target if target in symbols else min(symbols)
                for row in rows:
                    if row[target] in symbols:
                        row[target] = chosen
                changed = True
    return any(all(row[col] == col for col in columns) for row in rows)


def preserves_dependencies(relation: Relation, derived: Sequence[Relation]) -> bool:
    """True when every dependency of ``relation`` follows from its projections onto ``derived``."""
    for fd in relation.fds:
        result = set(fd.lhs)
        changed = True
        while changed:
            changed = False
            for rel in derived:
                gained = closure(result & rel.columns, relation.fds) & rel.columns
                if not gained <= result:
                    result |= gained
                    changed = True
        if not fd.rhs <= result:
            return False
    return True
