"""
Diagnose the MongoDB connection used by the practice engine.

Pings the server, counts documents per collection and creates any missing
indexes.

Usage:
    python -m scripts.diagnose_mongo
"""

import asyncio
import sys
import time

from polish_trainer.config import DB_NAME, configure_logging
from polish_trainer.repos.mongo import INDEXES, close_client, ensure_indexes, get_client, get_database


async def diagnose() -> bool:
    print("=" * 60)
    print(f"MongoDB Diagnostics ({DB_NAME})")
    print("=" * 60)

    print("\n--- Test 1: Connection Time ---")
    client = get_client()
    start = time.time()
    try:
        await client.admin.command("ping")
    except Exception as e:
        print(f"Connection failed: {e}")
        await close_client()
        return False
    print(f"Connection established: {(time.time() - start) * 1000:.2f}ms")

    db = get_database()
    try:
        print("\n--- Test 2: Collection Counts ---")
        for name in INDEXES:
            start = time.time()
            count = await db[name].count_documents({})
            elapsed = (time.time() - start) * 1000
            print(f"{name}: {count} documents ({elapsed:.2f}ms)")

        print("\n--- Test 3: Indexes ---")
        created = await ensure_indexes(db)
        for name, index_names in created.items():
            print(f"  - {name}: {', '.join(index_names)}")

        print("\n--- Test 4: Network Latency Estimate ---")
        pings = []
        for _ in range(3):
            start = time.time()
            await client.admin.command("ping")
            pings.append((time.time() - start) * 1000)
        avg_ping = sum(pings) / len(pings)
        print(f"Average ping: {avg_ping:.2f}ms")
        if avg_ping > 200:
            print("\n⚠️  HIGH LATENCY: Network ping > 200ms")
        else:
            print(f"\n✓ Network latency looks good ({avg_ping:.2f}ms)")
    finally:
        await close_client()
    return True


def main():
    configure_logging()
    if not asyncio.run(diagnose()):
        sys.exit(1)


if __name__ == "__main__":
    main()
