"""Deterministic seed data for the record store."""

import random
from decimal import Decimal

from product_grid.domain.entities import Product, round_money

# (product line, category)
PRODUCT_LINES: tuple[tuple[str, str], ...] = (
    ("Aurora Headphones", "Audio"),
    ("Lumen Desk Lamp", "Lighting"),
    ("Nimbus Router", "Networking"),
    ("Solace Monitor", "Displays"),
    ("Pulse Keyboard", "Peripherals"),
    ("Echo Speakers", "Audio"),
    ("Quanta Mouse", "Peripherals"),
    ("Zenith Webcam", "Peripherals"),
    ("Vertex Laptop Stand", "Accessories"),
    ("Nova USB Hub", "Accessories"),
)


def seed_products(count: int = 50, seed: int = 1337) -> list[Product]:
    """Build ``count`` products with ids 1..count.

    Prices fall in [50, 1000), quantities in [1, 20]. Every third product has
    no description so that undefined values show up in sorting.
    """
    rng = random.Random(seed)
    products = []
    for product_id in range(1, count + 1):
        line, category = PRODUCT_LINES[product_id % len(PRODUCT_LINES)]
        price = round_money(Decimal(str(50 + rng.random() * 950)))
        quantity = rng.randint(1, 20)
        description = None if product_id % 3 == 0 else f"{line}, batch {product_id}"
        products.append(
            Product(
                id=product_id,
                name=f"{line} #{product_id}",
                price=price,
                quantity=quantity,
                category=category,
                description=description,
            )
        )
    return products
