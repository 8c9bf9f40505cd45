import argparse
import logging

from .config import get_settings
from .db import SessionLocal, init_db
from .seed import load_catalog, seed_store
from .store import EntityStore


def main(argv=None):
    parser = argparse.ArgumentParser(description="SwiftBites recipe catalog")
    parser.add_argument(
        "--seed", action="store_true",
        help="replace the catalog with the bundled sample data",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_db()
    store = EntityStore(SessionLocal)
    if args.seed:
        seed_store(store, load_catalog(settings.seed_file))

    recipes = store.list_recipes()
    print(f"Loaded {len(recipes)} recipe(s).")
    for r in recipes:
        category = r.category.name if r.category else "-"
        print(f"- {r.name} [{category}]")


if __name__ == "__main__":
    main()
