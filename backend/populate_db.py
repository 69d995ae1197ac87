import asyncio
import logging

from database import SessionLocal, init_db
from schemas.dictionary import DictionaryKind
from services.errors import DuplicateError
from services.inventory import InventoryService
from utils.sql_store import SqlRowStore

logger = logging.getLogger("populate_db")

# Configuration
CATEGORIES = ["Hair Care", "Skin Care", "Nail Care", "Styling", "Tools"]
UOMS = ["50ml", "100ml", "250ml", "500ml", "1L", "Sachet", "Piece"]
PRODUCTS = [
    # name, description, category, packaging, quantity, price, low stock level
    ("Shampoo", "Sulfate-free daily shampoo", "Hair Care", "500ml", 20, 250, 5),
    ("Conditioner", "Keratin conditioner", "Hair Care", "500ml", 15, 280, 5),
    ("Hair Serum", "Argan oil serum", "Styling", "50ml", 12, 420, 3),
    ("Facial Cleanser", "Gentle foaming cleanser", "Skin Care", "100ml", 8, 310, 4),
    ("Nail Polish Remover", "Acetone-free remover", "Nail Care", "250ml", 0, 120, 2),
    ("Hair Color Cream", "Permanent color, shade 5.0", "Hair Care", "Sachet", 40, 95, 10),
]
# End Configuration


async def _entries_by_name(inventory: InventoryService, kind: DictionaryKind, names):
    for name in names:
        try:
            await inventory.add_dictionary_entry(kind, name)
        except DuplicateError:
            pass
    return {e.name: e.id for e in await inventory.list_dictionary(kind)}


async def populate():
    """Seeds dictionaries and a starter catalog; skips products that already exist."""
    init_db()
    session = SessionLocal()
    try:
        inventory = InventoryService(SqlRowStore(session))
        categories = await _entries_by_name(inventory, DictionaryKind.CATEGORY, CATEGORIES)
        uoms = await _entries_by_name(inventory, DictionaryKind.UOM, UOMS)

        existing = {p.name for p in (await inventory.list_products(page_size=1000)).items}
        for name, description, category, packaging, quantity, price, low in PRODUCTS:
            if name in existing:
                continue
            product = await inventory.create_product_with_initial_stock({
                "name": name,
                "description": description,
                "category": categories[category],
                "packaging": uoms[packaging],
                "initial_quantity": quantity,
                "selling_price": price,
            })
            await inventory.set_low_stock_level(product.product_id, low)
            logger.info("Seeded %s (%s)", product.name, product.product_id)
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(populate())
