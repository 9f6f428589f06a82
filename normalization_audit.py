"""
Normal-form audit & decomposition proposal tool.

Reads relation snapshots (columns plus functional dependencies) either from a
JSON file or from live databases through SQLAlchemy, classifies each relation
with the normalization engine and writes the candidate keys, canonical cover
and a 2NF/3NF decomposition proposal to disk. All configuration lives in the
CONFIG constant below; command-line flags only pick the input and the target
normal form.

No DDL is produced and no physical schema change is executed. The only writes
against a database go to the functional dependency catalog tables, and only
through an explicit FdEditSession.commit().
"""
from __future__ import annotations

import argparse
import csv
import json
import re
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    insert,
    inspect,
    select,
    text,
)
from sqlalchemy.engine import Connection, Engine

from normalization_engine import (
    DerivedRelation,
    FunctionalDependency,
    InvalidRelation,
    NormalForm,
    NormalizationError,
    Relation,
    UNSAVED_ID,
    bcnf_violations,
    candidate_keys,
    canonical_cover,
    check_complexity,
    decompose,
    is_implied,
    is_lossless,
    non_key_attributes,
    normal_form,
    ordered,
    preserves_dependencies,
    second_nf_violations,
    third_nf_violations,
    validate_relation,
)


# --------------------------------------------------------------------------------------
# Configuration
# --------------------------------------------------------------------------------------
CONFIG: Dict[str, Any] = {
    "SOURCES": [
        {
            # Any SQLAlchemy URL works; the demo database is created by seed_demo.py.
            "name": "Demo",
            "sqlalchemy_url": "sqlite:///demo.db",
        }
    ],
    "SCOPE": {
        "SCHEMA": None,  # None = the connection's default schema
        "INCLUDE_TABLES": None,  # regex or None
        "EXCLUDE_TABLES": None,
        # Optional explicit allowlist of table names
        "TABLE_ALLOWLIST": None,
    },
    "LIMITS": {
        # Candidate-key enumeration is exponential in the attribute count.
        "MAX_ATTRIBUTES": 16,
    },
    "CATALOG": {
        "TABLE_PREFIX": "fd_catalog",
    },
    "NORMALIZATION": {
        "TARGET_FORM": "3NF",
    },
    "OUTPUT": {
        "BASE_PATH": "output",
    },
}

TARGET_FORMS: Dict[str, NormalForm] = {"2NF": NormalForm.SECOND, "3NF": NormalForm.THIRD}


# --------------------------------------------------------------------------------------
# Utility helpers
# --------------------------------------------------------------------------------------
def qualifies(scope_regex: Optional[str], value: str) -> bool:
    """Helper to evaluate regex filters while treating None as pass-through."""
    if scope_regex is None:
        return True
    return re.search(scope_regex, value) is not None


def target_form(label: str) -> NormalForm:
    try:
        return TARGET_FORMS[label.upper()]
    except KeyError:
        raise ValueError(f"Unsupported target form {label!r}; expected one of {sorted(TARGET_FORMS)}") from None


class FdRejected(NormalizationError):
    """A proposed dependency is already implied or is infringed by the stored rows."""


# --------------------------------------------------------------------------------------
# Database client
# --------------------------------------------------------------------------------------
class DatabaseClient:
    """Thin wrapper around a SQLAlchemy engine with context-managed execution."""

    def __init__(self, url: str) -> None:
        self.engine: Engine = create_engine(url)

    def fetch_all(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Execute a read-only statement and return every row.

        Parameters are separated from identifiers to avoid injection. Identifiers
        must be quoted by the caller (see ``quote``).
        """
        with self.engine.connect() as conn:
            return conn.execute(text(sql), params or {}).fetchall()

    def fetch_value(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Any:
        rows = self.fetch_all(sql, params)
        return None if not rows else rows[0][0]

    def quote(self, name: str) -> str:
        return self.engine.dialect.identifier_preparer.quote(name)


# --------------------------------------------------------------------------------------
# Storage ports
# --------------------------------------------------------------------------------------
class CatalogPort(ABC):
    @abstractmethod
    def load(self, relation_name: str) -> List[FunctionalDependency]:
        """Returns the persisted dependencies of a relation, each carrying its catalog id."""

    @abstractmethod
    def apply(
        self,
        relation_name: str,
        added: Sequence[FunctionalDependency],
        removed: Sequence[FunctionalDependency],
    ) -> List[int]:
        """Persists additions and removals atomically and returns the ids given to ``added``."""


class InstancePort(ABC):
    @abstractmethod
    def holds(self, relation_name: str, fd: FunctionalDependency) -> bool:
        """True when no stored rows infringe the dependency."""

    @abstractmethod
    def is_unique_in_storage(self, relation_name: str, attrs: Iterable[str]) -> bool:
        """True when a declared uniqueness guarantee covers exactly ``attrs``."""


# --------------------------------------------------------------------------------------
# Metadata reader
# --------------------------------------------------------------------------------------
class MetadataReader:
    """Reads tables, columns and declared key constraints through the SQLAlchemy inspector."""

    def __init__(self, client: DatabaseClient, schema: Optional[str] = None) -> None:
        self.client = client
        self.schema = schema

    def list_tables(self) -> List[str]:
        prefix = CONFIG["CATALOG"]["TABLE_PREFIX"]
        names = inspect(self.client.engine).get_table_names(schema=self.schema)
        return sorted(n for n in names if not n.startswith(prefix))

    def list_columns(self, table: str) -> List[str]:
        return [c["name"] for c in inspect(self.client.engine).get_columns(table, schema=self.schema)]

    def key_constraints(self, table: str) -> List[Tuple[str, ...]]:
        """Primary key first, then unique constraints, each as a column tuple."""
        inspector = inspect(self.client.engine)
        keys: List[Tuple[str, ...]] = []
        pk = inspector.get_pk_constraint(table, schema=self.schema).get("constrained_columns") or []
        if pk:
            keys.append(tuple(pk))
        for uc in inspector.get_unique_constraints(table, schema=self.schema):
            keys.append(tuple(uc["column_names"]))
        return keys

    def read_relation(self, table: str, catalog: Optional[CatalogPort] = None) -> Relation:
        """Snapshot of a table: catalog dependencies first, then one key dependency per declared key."""
        columns = frozenset(self.list_columns(table))
        fds: List[FunctionalDependency] = list(catalog.load(table)) if catalog is not None else []
        for key in self.key_constraints(table):
            rest = columns - frozenset(key)
            if rest:
                fds.append(FunctionalDependency(key, rest, is_key=True))
        return Relation(name=table, columns=columns, fds=tuple(fds))


# --------------------------------------------------------------------------------------
# FD catalog
# --------------------------------------------------------------------------------------
class SqlCatalog(CatalogPort):
    """Functional dependency catalog kept in three tables (header, left side, right side)."""

    def __init__(self, client: DatabaseClient, prefix: Optional[str] = None) -> None:
        self.client = client
        prefix = prefix or CONFIG["CATALOG"]["TABLE_PREFIX"]
        self.metadata = MetaData()
        self.header = Table(
            prefix,
            self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("relation", String(80), nullable=False),
            Column("iskey", Boolean, nullable=False, default=False),
        )
        self.lhs = self._side_table(f"{prefix}_lhs", prefix)
        self.rhs = self._side_table(f"{prefix}_rhs", prefix)

    def _side_table(self, name: str, prefix: str) -> Table:
        return Table(
            name,
            self.metadata,
            Column("id", Integer, ForeignKey(f"{prefix}.id", ondelete="CASCADE"), primary_key=True),
            Column("attribute", String(80), primary_key=True),
        )

    def ensure(self) -> None:
        self.metadata.create_all(self.client.engine)

    def load(self, relation_name: str) -> List[FunctionalDependency]:
        with self.client.engine.connect() as conn:
            heads = conn.execute(
                select(self.header.c.id, self.header.c.iskey)
                .where(self.header.c.relation == relation_name)
                .order_by(self.header.c.id)
            ).fetchall()
            ids = [h[0] for h in heads]
            if not ids:
                return []
            sides: Dict[str, Dict[int, set]] = {"lhs": {}, "rhs": {}}
            for side, table in (("lhs", self.lhs), ("rhs", self.rhs)):
                for fd_id, attribute in conn.execute(select(table.c.id, table.c.attribute).where(table.c.id.in_(ids))):
                    sides[side].setdefault(fd_id, set()).add(attribute)
        return [
            FunctionalDependency(
                sides["lhs"].get(fd_id, set()),
                sides["rhs"].get(fd_id, set()),
                is_key=bool(iskey),
                catalog_id=fd_id,
            )
            for fd_id, iskey in heads
        ]

    def _insert(self, conn: Connection, relation_name: str, fd: FunctionalDependency) -> int:
        result = conn.execute(insert(self.header).values(relation=relation_name, iskey=fd.is_key))
        fd_id = int(result.inserted_primary_key[0])
        for table, attrs in ((self.lhs, fd.lhs), (self.rhs, fd.rhs)):
            conn.execute(insert(table), [{"id": fd_id, "attribute": a} for a in ordered(attrs)])
        return fd_id

    def _delete(self, conn: Connection, catalog_id: int) -> None:
        # Not every backend enforces ON DELETE CASCADE (SQLite needs a pragma), so clean up explicitly.
        conn.execute(delete(self.lhs).where(self.lhs.c.id == catalog_id))
        conn.execute(delete(self.rhs).where(self.rhs.c.id == catalog_id))
        conn.execute(delete(self.header).where(self.header.c.id == catalog_id))

    def add(self, relation_name: str, fd: FunctionalDependency) -> int:
        return self.apply(relation_name, [fd], [])[0]

    def remove(self, catalog_id: int) -> None:
        with self.client.engine.begin() as conn:
            self._delete(conn, catalog_id)

    def apply(
        self,
        relation_name: str,
        added: Sequence[FunctionalDependency],
        removed: Sequence[FunctionalDependency],
    ) -> List[int]:
        with self.client.engine.begin() as conn:
            for fd in removed:
                self._delete(conn, fd.catalog_id)
            return [self._insert(conn, relation_name, fd) for fd in added]


# --------------------------------------------------------------------------------------
# Instance checks
# --------------------------------------------------------------------------------------
class SqlInstance(InstancePort):
    """Validates dependencies against stored rows and declared constraints."""

    def __init__(self, client: DatabaseClient, schema: Optional[str] = None) -> None:
        self.client = client
        self.schema = schema

    def _qualified(self, table: str) -> str:
        if self.schema:
            return f"{self.client.quote(self.schema)}.{self.client.quote(table)}"
        return self.client.quote(table)

    def violating_groups(self, relation_name: str, fd: FunctionalDependency) -> int:
        # For X -> Y, groups of equal X where some Y column holds more than one value are violating.
        lhs_cols = ", ".join(self.client.quote(c) for c in ordered(fd.lhs))
        not_null_filter = " AND ".join(f"{self.client.quote(c)} IS NOT NULL" for c in ordered(fd.lhs))
        having = " OR ".join(f"COUNT(DISTINCT {self.client.quote(c)}) > 1" for c in ordered(fd.rhs))
        sql = (
            f"SELECT COUNT(*) FROM ("
            f"SELECT {lhs_cols} FROM {self._qualified(relation_name)}"
            f" WHERE {not_null_filter}"
            f" GROUP BY {lhs_cols} HAVING {having}"
            f") g"
        )
        return int(self.client.fetch_value(sql) or 0)

    def holds(self, relation_name: str, fd: FunctionalDependency) -> bool:
        return self.violating_groups(relation_name, fd) == 0

    def is_unique_in_storage(self, relation_name: str, attrs: Iterable[str]) -> bool:
        wanted = frozenset(attrs)
        reader = MetadataReader(self.client, self.schema)
        return any(frozenset(key) == wanted for key in reader.key_constraints(relation_name))


# --------------------------------------------------------------------------------------
# Edit session
# --------------------------------------------------------------------------------------
class FdEditSession:
    """Stages dependency edits on one relation as preview overlays until commit or rollback."""

    def __init__(self, relation: Relation, catalog: CatalogPort, instance: Optional[InstancePort] = None) -> None:
        self.relation = relation
        self.catalog = catalog
        self.instance = instance

    def add_fd(self, fd: FunctionalDependency) -> FunctionalDependency:
        preview = self.relation.preview()
        outside = fd.attributes - preview.columns
        if outside or not fd.lhs or not fd.rhs:
            raise InvalidRelation(f"'{fd}' is not a valid dependency of {self.relation.name!r}")
        if is_implied(fd, preview):
            raise FdRejected(f"'{fd}' is already implied by the dependencies of {self.relation.name!r}")
        if self.instance is not None and not self.instance.holds(self.relation.name, fd):
            raise FdRejected(f"'{fd}' is infringed by the stored rows of {self.relation.name!r}")
        unique = self.instance is not None and self.instance.is_unique_in_storage(self.relation.name, fd.lhs)
        staged = replace(fd, is_key=unique)
        self.relation = self.relation.with_additional_fd(staged)
        return staged

    def remove_fd(self, catalog_id: int) -> FunctionalDependency:
        # Key dependencies derived from declared constraints have no catalog row.
        if catalog_id == UNSAVED_ID:
            raise NormalizationError(
                f"Dependencies of {self.relation.name!r} without a catalog row cannot be removed"
            )
        for fd in self.relation.fds:
            if fd.catalog_id == catalog_id:
                self.relation = self.relation.with_removed_fd(fd)
                return fd
        raise NormalizationError(f"No dependency with catalog id {catalog_id} in {self.relation.name!r}")

    @property
    def has_changes(self) -> bool:
        return self.relation.has_overlays

    def preview(self) -> Relation:
        return self.relation.preview()

    def normal_form(self, preview: bool = True) -> NormalForm:
        return normal_form(self.relation.preview() if preview else self.relation.discard_overlays())

    def normalize(self, target: NormalForm) -> List[DerivedRelation]:
        return decompose(self.relation.discard_overlays(), target)

    def rollback(self) -> None:
        self.relation = self.relation.discard_overlays()

    def commit(self) -> Relation:
        added = list(self.relation.additional_fds)
        ids = self.catalog.apply(self.relation.name, added, list(self.relation.removed_fds))
        saved = [replace(fd, catalog_id=fd_id) for fd, fd_id in zip(added, ids)]
        kept = [fd for fd in self.relation.effective_fds(preview=True) if fd not in set(added)]
        self.relation = replace(self.relation.discard_overlays(), fds=tuple(kept + saved))
        return self.relation


# --------------------------------------------------------------------------------------
# Relation analysis
# --------------------------------------------------------------------------------------
class RelationAnalyzer:
    """Derives keys, canonical cover, normal form and a decomposition proposal for one relation."""

    def __init__(self, relation: Relation, target: NormalForm = NormalForm.THIRD) -> None:
        self.relation = relation
        self.target = target

    def analyze(self) -> Dict[str, Any]:
        relation = self.relation
        validate_relation(relation)
        keys = candidate_keys(relation)
        form = normal_form(relation)

        derived: List[DerivedRelation] = []
        if form < self.target:
            derived = decompose(relation, self.target)

        return {
            "relation": relation.name,
            "normal_form": form.label,
            "candidate_keys": [list(ordered(k)) for k in keys],
            "non_key_attributes": list(ordered(non_key_attributes(relation, keys))),
            "canonical_cover": [self._fd_summary(fd) for fd in canonical_cover(relation)],
            "second_nf_issues": [self._fd_summary(fd) for fd in second_nf_violations(relation, keys)],
            "third_nf_issues": [self._fd_summary(fd) for fd in third_nf_violations(relation, keys)],
            "bcnf_issues": [self._fd_summary(fd) for fd in bcnf_violations(relation, keys)],
            "target_form": self.target.label,
            "decomposition": [self._derived_summary(d) for d in derived],
            "lossless": is_lossless(relation, derived) if derived else None,
            "dependency_preserving": preserves_dependencies(relation, derived) if derived else None,
        }

    @staticmethod
    def _fd_summary(fd: FunctionalDependency) -> Dict[str, Any]:
        return {
            "lhs": list(ordered(fd.lhs)),
            "rhs": list(ordered(fd.rhs)),
            "is_key": fd.is_key,
            "catalog_id": fd.catalog_id,
        }

    @classmethod
    def _derived_summary(cls, rel: DerivedRelation) -> Dict[str, Any]:
        return {
            "name": rel.name,
            "origin_name": rel.origin_name,
            "columns": list(ordered(rel.columns)),
            "origin_fd": cls._fd_summary(rel.origin_fd) if rel.origin_fd is not None else None,
            "fds": [cls._fd_summary(fd) for fd in rel.fds],
        }


def load_relations_file(path: Path) -> List[Relation]:
    """Read ``{"relations": [{"name", "columns", "fds": ["A, B -> C", ...]}]}``."""
    payload = json.loads(Path(path).read_text())
    relations = []
    for entry in payload.get("relations", []):
        relations.append(Relation.from_strings(entry["name"], entry["columns"], entry.get("fds", [])))
    return relations


# --------------------------------------------------------------------------------------
# Artifact writer
# --------------------------------------------------------------------------------------
class ArtifactWriter:
    """Handles filesystem output for both machine-readable and human-readable artifacts."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.manifest: Dict[str, Any] = {"relations": []}
        self.summary_rows: List[List[Any]] = []

    def relation_folder(self, source: str, relation_name: str) -> Path:
        return self.base_path / f"source_{source}" / relation_name

    def write_json(self, path: Path, obj: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(obj, indent=2, default=str))

    def append_manifest(self, entry: Dict[str, Any]) -> None:
        self.manifest["relations"].append(entry)

    def finalize(self) -> None:
        (self.base_path / "manifest.json").write_text(json.dumps(self.manifest, indent=2, default=str))
        with (self.base_path / "summary.csv").open("w", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerow(["source", "relation", "attributes", "normal_form", "candidate_keys", "decomposed_into"])
            for row in self.summary_rows:
                writer.writerow(row)

    def write_report(self, path: Path, analysis: Dict[str, Any]) -> None:
        lines = [
            f"# Normal Form Report: {analysis['relation']}",
            "",
            f"- Normal form: {analysis['normal_form']}",
            "- Candidate keys: " + "; ".join(", ".join(k) for k in analysis["candidate_keys"]),
            "- Non-key attributes: " + ", ".join(analysis["non_key_attributes"]),
            "",
            "## Canonical Cover",
        ]
        for fd in analysis["canonical_cover"]:
            lines.append(f"- {' '.join(fd['lhs'])} -> {' '.join(fd['rhs'])}")
        lines.append("")
        lines.append("## Findings")
        lines.append(f"- 2NF issues: {len(analysis['second_nf_issues'])}")
        lines.append(f"- 3NF issues: {len(analysis['third_nf_issues'])}")
        lines.append(f"- BCNF issues: {len(analysis['bcnf_issues'])}")
        lines.append("")
        lines.append(f"## Decomposition ({analysis['target_form']})")
        if analysis["decomposition"]:
            for rel in analysis["decomposition"]:
                origin = rel["origin_fd"]
                lines.append(
                    f"- {rel['name']}({', '.join(rel['columns'])}) from "
                    f"{' '.join(origin['lhs'])} -> {' '.join(origin['rhs'])}"
                )
            lines.append(f"- Lossless join: {analysis['lossless']}")
            lines.append(f"- Dependency preserving: {analysis['dependency_preserving']}")
        else:
            lines.append(f"- No proposals. Relation already satisfies {analysis['target_form']}.")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines))


# --------------------------------------------------------------------------------------
# Runner
# --------------------------------------------------------------------------------------
class Runner:
    """Orchestrates the audit across a relations file or the configured sources."""

    def __init__(self, base_path: Optional[Path] = None, target: Optional[NormalForm] = None) -> None:
        ts = datetime.now(timezone.utc).strftime("run_%Y%m%d_%H%M%S")
        self.output_root = (base_path or Path(CONFIG["OUTPUT"]["BASE_PATH"])) / ts
        self.writer = ArtifactWriter(self.output_root)
        self.target = target or target_form(CONFIG["NORMALIZATION"]["TARGET_FORM"])

    def run_file(self, path: Path) -> None:
        print(f"[INFO] Reading relations from {path}")
        for relation in load_relations_file(path):
            self.audit("file", relation)
        self.finish()

    def run_sources(self) -> None:
        for source in CONFIG["SOURCES"]:
            print(f"[INFO] Connecting to source {source['name']}")
            client = DatabaseClient(source["sqlalchemy_url"])
            metadata = MetadataReader(client, CONFIG["SCOPE"]["SCHEMA"])
            catalog = SqlCatalog(client)
            catalog.ensure()
            for table in metadata.list_tables():
                if not self._in_scope(table):
                    continue
                try:
                    relation = metadata.read_relation(table, catalog)
                except Exception as exc:
                    print(f"[ERROR] Failed reading {table}: {exc}")
                    self.writer.append_manifest({"source": source["name"], "relation": table, "error": str(exc)})
                    continue
                self.audit(source["name"], relation)
        self.finish()

    def audit(self, source: str, relation: Relation) -> Optional[Dict[str, Any]]:
        print(f"[INFO] Auditing {relation.name}")
        try:
            check_complexity(relation, CONFIG["LIMITS"]["MAX_ATTRIBUTES"])
        except NormalizationError as exc:
            print(f"[WARN] Skipping {relation.name}: {exc}")
            self.writer.append_manifest({"source": source, "relation": relation.name, "skipped": str(exc)})
            return None
        try:
            analysis = RelationAnalyzer(relation, self.target).analyze()
        except Exception as exc:
            print(f"[ERROR] Failed auditing {relation.name}: {exc}")
            self.writer.append_manifest({"source": source, "relation": relation.name, "error": str(exc)})
            return None

        folder = self.writer.relation_folder(source, relation.name)
        self.writer.write_json(folder / "relation.json", self._relation_to_dict(relation))
        self.writer.write_json(folder / "candidate_keys.json", analysis["candidate_keys"])
        self.writer.write_json(folder / "canonical_cover.json", analysis["canonical_cover"])
        self.writer.write_json(folder / "decomposition.json", analysis["decomposition"])
        self.writer.write_report(folder / "report.md", analysis)
        self.writer.append_manifest(
            {"source": source, "relation": relation.name, "normal_form": analysis["normal_form"]}
        )
        self.writer.summary_rows.append(
            [
                source,
                relation.name,
                len(relation.columns),
                analysis["normal_form"],
                analysis["candidate_keys"],
                [d["name"] for d in analysis["decomposition"]],
            ]
        )
        return analysis

    def finish(self) -> None:
        self.writer.finalize()
        print(f"[INFO] Run complete. Artifacts at {self.output_root}")

    def _in_scope(self, table: str) -> bool:
        scope = CONFIG["SCOPE"]
        if scope.get("TABLE_ALLOWLIST") and table not in scope["TABLE_ALLOWLIST"]:
            return False
        if not qualifies(scope.get("INCLUDE_TABLES"), table):
            return False
        if scope.get("EXCLUDE_TABLES") and re.search(scope["EXCLUDE_TABLES"], table):
            return False
        return True

    @staticmethod
    def _relation_to_dict(relation: Relation) -> Dict[str, Any]:
        return {
            "name": relation.name,
            "columns": list(ordered(relation.columns)),
            "fds": [RelationAnalyzer._fd_summary(fd) for fd in relation.fds],
        }


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify relations and propose 2NF/3NF decompositions.")
    parser.add_argument(
        "relations",
        nargs="?",
        type=Path,
        help="JSON file of relations; the configured database sources are audited when omitted.",
    )
    parser.add_argument(
        "--target",
        choices=sorted(TARGET_FORMS),
        default=CONFIG["NORMALIZATION"]["TARGET_FORM"],
        help="Normal form the decomposition proposals aim for (default: %(default)s)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Base directory for artifacts")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    runner = Runner(base_path=args.output, target=target_form(args.target))
    if args.relations is not None:
        runner.run_file(args.relations)
    else:
        runner.run_sources()


if __name__ == "__main__":
    main()
