"""
Demo database generator for querydesk.

Creates an SQLite file with a deterministic pseudo-random ``records`` table so
the CLI and the desktop client have something to query without a server.
"""

from __future__ import annotations

import asyncio
import json
import random
import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Tuple

import aiosqlite
import typer

app = typer.Typer(help="Generate a demo SQLite database for querydesk.")

SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL,
    category TEXT NOT NULL,
    payload TEXT NOT NULL,
    amount REAL NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    source TEXT NOT NULL DEFAULT 'generator'
)
"""

INSERT_SQL = (
    "INSERT INTO records (created_at, category, payload, amount, is_active, source) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)

RecordTuple = Tuple[str, str, str, float, int, str]


def _generate_rows(rows: int, seed: int) -> List[RecordTuple]:
    rng = random.Random(seed)
    categories = ["alpha", "beta", "gamma", "delta"]
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    generated: List[RecordTuple] = []
    for i in range(rows):
        payload = {
            "user_id": rng.randint(1, 1_000_000),
            "action": rng.choice(["view", "click", "purchase", "impression"]),
        }
        generated.append(
            (
                (start + timedelta(minutes=i)).isoformat(),
                rng.choice(categories),
                json.dumps(payload),
                round(rng.uniform(1, 10_000), 2),
                1 if rng.random() < 0.8 else 0,
                "generator",
            )
        )
    return generated


async def _write_database(db_path: Path, rows: List[RecordTuple], batch_size: int) -> int:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SCHEMA)
        for offset in range(0, len(rows), batch_size):
            await db.executemany(INSERT_SQL, rows[offset : offset + batch_size])
        await db.commit()
        async with db.execute("SELECT COUNT(*) FROM records") as cursor:
            (count,) = await cursor.fetchone()
    return count


@app.command()
def main(
    output: Path = typer.Option(
        Path("demo.db"),
        "--output",
        "-o",
        help="SQLite file to create or extend.",
    ),
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of rows to generate.",
    ),
    batch_size: int = typer.Option(
        500,
        "--batch-size",
        "-b",
        help="Rows per executemany batch.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
) -> None:
    """
    Generate demo rows and write them into an SQLite database.
    """
    start = time.perf_counter()
    output.parent.mkdir(parents=True, exist_ok=True)
    typer.echo(f"Generating {rows:,} rows -> {output} (batch={batch_size}, seed={seed})")
    total = asyncio.run(_write_database(output, _generate_rows(rows, seed), batch_size))
    duration = time.perf_counter() - start
    typer.echo(
        f"Done in {duration:.2f}s; {output} now holds {total:,} records. "
        f"Try: querydesk query --conn sqlite://{output} \"SELECT * FROM records LIMIT 5\""
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
