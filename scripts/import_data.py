import sys
from pathlib import Path

from swiftbites.config import get_settings
from swiftbites.db import SessionLocal, init_db
from swiftbites.seed import load_catalog, seed_store
from swiftbites.store import EntityStore


def main():
    init_db()
    p = Path(sys.argv[1]) if len(sys.argv) > 1 else get_settings().seed_file
    if not p.exists():
        print(f'{p} not found')
        return
    store = EntityStore(SessionLocal)
    added = seed_store(store, load_catalog(p), clear=False)
    print(
        f"Imported {added['recipes']} recipes, "
        f"{added['ingredients']} ingredients, "
        f"{added['categories']} categories"
    )


if __name__ == '__main__':
    main()
