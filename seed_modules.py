"""
Publish the built-in module catalog to the `module_definitions` collection.

    python seed_modules.py            # publish every built-in module
    python seed_modules.py --dry-run  # validate only, write nothing

The whole set is validated before anything is written and then upserted in
one ordered bulk write. If the run is interrupted, run it again.
"""

import argparse
import asyncio

from calycompta.config import db_manager
from calycompta.modules.builtin import BUILTIN_MODULES
from calycompta.modules.catalog import ModuleCatalog, BuiltinCatalogSource, publish_catalog
from calycompta.utils import Logger

logger = Logger("seed")


async def main(dry_run: bool) -> None:
    if dry_run:
        catalog = await ModuleCatalog.load([BuiltinCatalogSource()])
        logger.info(f"{len(catalog)} module definitions are valid, nothing written")
        return

    await db_manager.connect()
    try:
        count = await publish_catalog(db_manager.database, BUILTIN_MODULES)
        logger.info(f"Catalog published: {count} modules")
    finally:
        db_manager.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    asyncio.run(main(args.dry_run))
