"""Seed the demo database used by `python normalization_audit.py`.

Usage is intentionally minimal to match the three-step workflow:

1. Run this script once; if the demo tables already exist, nothing happens.
2. Run `python normalization_audit.py` (no arguments audits the configured sources).
3. Inspect the artifacts under `output/`.
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from normalization_audit import DatabaseClient, SqlCatalog
from normalization_engine import FunctionalDependency


DEFAULT_URL = "sqlite:///demo.db"

DEMO_TABLES_SQL = [
    """
    CREATE TABLE OrderLines (
        OrderID INTEGER NOT NULL,
        ProductID INTEGER NOT NULL,
        CustomerName VARCHAR(80),
        CustomerCity VARCHAR(80),
        ProductName VARCHAR(80),
        Quantity INTEGER,
        PRIMARY KEY (OrderID, ProductID)
    )
    """,
    """
    CREATE TABLE Customers (
        CustomerID INTEGER PRIMARY KEY,
        Email VARCHAR(120) NOT NULL,
        Name VARCHAR(80),
        CONSTRAINT uq_customers_email UNIQUE (Email)
    )
    """,
]

DEMO_ROWS_SQL = [
    "INSERT INTO OrderLines VALUES (1, 10, 'Ada', 'London', 'Widget', 3)",
    "INSERT INTO OrderLines VALUES (1, 11, 'Ada', 'London', 'Gadget', 1)",
    "INSERT INTO OrderLines VALUES (2, 10, 'Grace', 'Arlington', 'Widget', 7)",
    "INSERT INTO OrderLines VALUES (3, 12, 'Ada', 'London', 'Sprocket', 2)",
    "INSERT INTO Customers VALUES (1, 'ada@example.com', 'Ada')",
    "INSERT INTO Customers VALUES (2, 'grace@example.com', 'Grace')",
]

# Dependencies known from the business rules but not declared as constraints.
DEMO_FDS = {
    "OrderLines": [
        "OrderID -> CustomerName",
        "CustomerName -> CustomerCity",
        "ProductID -> ProductName",
    ],
}


def demo_exists(client: DatabaseClient) -> bool:
    return "OrderLines" in inspect(client.engine).get_table_names()


def seed(client: DatabaseClient) -> None:
    if demo_exists(client):
        print("Demo tables already present; nothing to do.")
        return

    print("Seeding demo tables...")
    with client.engine.begin() as conn:
        for i, statement in enumerate(DEMO_TABLES_SQL + DEMO_ROWS_SQL, start=1):
            print(f"Executing statement {i}...", flush=True)
            conn.execute(text(statement.strip()))

    catalog = SqlCatalog(client)
    catalog.ensure()
    for table, fds in DEMO_FDS.items():
        catalog.apply(table, [FunctionalDependency.parse(fd) for fd in fds], [])
    print("Seeding complete.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the demo database for the normal-form audit.")
    parser.add_argument("--url", default=DEFAULT_URL, help="SQLAlchemy URL (default: %(default)s)")
    args = parser.parse_args()
    try:
        seed(DatabaseClient(args.url))
    except OperationalError as exc:
        print("[ERROR] Could not seed the demo database. Check the URL and that the target is writable.")
        print(f"Details: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
