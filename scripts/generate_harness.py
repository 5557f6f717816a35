"""Generation harness for SnapQL.

Uses the saved settings (connection descriptor, OpenAI credentials) and the
SNAPQL_* environment from .env to print the canonical schema text, the
generated SQL and, with ``--run``, the first rows of its result.

Usage:
    uv run python scripts/generate_harness.py "top 5 customers by order total"
    uv run python scripts/generate_harness.py "same but only 2024" --existing "SELECT ..." --run
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import sys
from typing import Final

import dotenv

# Load env early
dotenv.load_dotenv()

# Add the project src/ to Python path for local imports when run directly
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

from snapql.services.query_service import QueryService  # noqa: E402

SEPARATOR: Final[str] = "=" * 72
MAX_ROWS_SHOWN: Final[int] = 5


def banner(title: str) -> None:
    print(f"\n{SEPARATOR}\n{title}\n{SEPARATOR}")


async def _run(intent: str, existing: str, run: bool) -> int:
    service = QueryService.from_env()
    descriptor = await service.gateway.get_connection_config()
    if descriptor is None:
        print("No connection configuration set; save one with set_connection_config first")
        return 1

    banner("schema")
    print(await service.synthesizer.schema_text(descriptor))

    generated = await service.generate_query(intent, existing)
    banner("generate_query")
    if generated.error is not None:
        print("error:", generated.error)
        return 1
    print(generated.data)

    if run and generated.data:
        result = await service.run_query(generated.data)
        banner("run_query")
        if result.error is not None:
            print("error:", result.error)
            return 1
        rows = result.data or []
        print(f"rows: {len(rows)}")
        for row in rows[:MAX_ROWS_SHOWN]:
            print("  ", row)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate SQL for a request against the saved DB")
    parser.add_argument("intent", help="Natural-language request")
    parser.add_argument("--existing", default="", help="Existing query to modify")
    parser.add_argument("--run", action="store_true", help="Execute the generated SQL")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(_run(args.intent, args.existing, args.run)))


if __name__ == "__main__":
    main()
