"""
Sample data for a fresh in-memory database

Seeds a demo vendor, the category list, three stores and their catalogs.
Seeding is idempotent: an already populated database is left alone.
"""
import logging
from decimal import Decimal

from grocer.core.auth import hash_password
from grocer.core.database import InMemoryDatabase
from grocer.domain.category import CategoryCreate
from grocer.domain.product import ProductCreate
from grocer.domain.store import StoreCreate
from grocer.domain.user import UserCreate
from grocer.repositories.category_repository import CategoryRepository
from grocer.repositories.product_repository import ProductRepository
from grocer.repositories.store_repository import StoreRepository
from grocer.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

CATEGORY_COLOR = "bg-blue-100 text-blue-600"

CATEGORIES = [
    ("Dairy", "ri-cup-fill"),
    ("Bakery", "ri-cake-2-line"),
    ("Groceries", "ri-shopping-bag-2-line"),
    ("Beverages", "ri-cup-line"),
    ("Snacks", "ri-restaurant-2-line"),
    ("Fruits", "ri-apple-line"),
    ("Vegetables", "ri-plant-line"),
    ("Spices", "ri-flask-line"),
]

STORE_LOCATION = "12.9716,77.5946"

STORES = [
    {
        "name": "More SuperMarket",
        "description": "Your one-stop shop for all grocery needs",
        "address": "123 Main Street",
        "delivery_time": "20-35 min",
        "delivery_fee": Decimal("30"),
        "min_order": Decimal("100"),
        "opening_hours": "7AM - 10PM",
    },
    {
        "name": "Super Bazaar",
        "description": "Traditional grocery store with authentic products",
        "address": "456 Market Road",
        "delivery_time": "15-30 min",
        "delivery_fee": Decimal("25"),
        "min_order": Decimal("50"),
        "opening_hours": "6AM - 9PM",
    },
    {
        "name": "Iyenger Bakery",
        "description": "Fresh and delicious bakery items",
        "address": "789 Bakery Lane",
        "delivery_time": "10-25 min",
        "delivery_fee": Decimal("20"),
        "min_order": Decimal("30"),
        "opening_hours": "6AM - 8PM",
    },
]

# (store index, category, name, description, price, unit, stock, sku)
PRODUCTS = [
    (0, "Dairy", "Amul Butter", "Pure and creamy butter", "110", "pack", 50, "AMUL-BTR-200"),
    (0, "Dairy", "Amul Paneer", "Fresh and soft paneer", "90", "pack", 30, "AMUL-PNR-200"),
    (0, "Groceries", "India Gate Basmati Rice", "Premium quality basmati rice", "180", "kg", 100, "IG-RICE-1KG"),
    (0, "Beverages", "Horlicks Original Refill", "Nutritious health drink", "230", "pack", 40, "HOR-REF-500"),
    (0, "Snacks", "Kellogg's Corn Flakes (Honey)", "Crunchy honey flavored corn flakes", "120", "pack", 35, "KEL-CF-300"),
    (0, "Fruits", "Fresh Apples", "Sweet and juicy apples", "200", "kg", 25, "FR-APP-1KG"),
    (0, "Fruits", "Fresh Bananas", "Ripe and sweet bananas", "60", "dozen", 40, "FR-BAN-DOZ"),
    (0, "Fruits", "Fresh Oranges", "Juicy and tangy oranges", "150", "kg", 30, "FR-ORG-1KG"),
    (1, "Groceries", "Ashirwad Atta", "Premium quality wheat flour", "75", "pack", 60, "ASH-ATTA-1"),
    (1, "Groceries", "Sugar", "Pure white sugar", "45", "kg", 100, "SUG-1KG"),
    (1, "Groceries", "Rice", "Premium quality rice", "60", "kg", 150, "RICE-1KG"),
    (1, "Groceries", "Cooking Oil", "Pure refined cooking oil", "130", "liter", 40, "OIL-1L"),
    (1, "Beverages", "Tea Powder", "Premium quality tea powder", "200", "pack", 30, "TEA-500G"),
    (1, "Spices", "Red Chilli Powder", "Pure red chilli powder", "150", "pack", 25, "CHILLI-500G"),
    (1, "Groceries", "Surf Excel", "Premium washing powder", "130", "kg", 35, "SURF-1KG"),
    (1, "Groceries", "Salt", "Iodized salt", "15", "pack", 80, "SALT-1"),
    (2, "Bakery", "Vegetable Puffs", "Fresh and crispy vegetable puffs", "15", "item", 50, "PUFF-1"),
    (2, "Bakery", "Samosa", "Spicy and crispy samosas", "5", "item", 100, "SAM-1"),
    (2, "Bakery", "Cake Slice", "Delicious cake slices", "10", "pack", 40, "SLICE-1"),
    (2, "Bakery", "Biscuits", "Crispy and tasty biscuits", "10", "pack", 60, "BISC-1"),
    (2, "Dairy", "Milk", "Fresh and pure milk", "27", "pack", 30, "MILK-1"),
]

DEMO_VENDOR = {
    "username": "vendor",
    "name": "Demo Vendor",
    "email": "vendor@yourgrocer.com",
    "phone": "9876543210",
    "address": "123 Main Street",
}


def seed_sample_data(db: InMemoryDatabase, vendor_password: str = "vendor123") -> bool:
    """
    Populate `db` with the sample marketplace

    Returns:
        False if the database already had users and nothing was written
    """
    users = UserRepository(db)
    if users.count() > 0:
        logger.info("Database already populated, skipping sample data")
        return False

    vendor = users.create(
        UserCreate(password=vendor_password, is_vendor=True, **DEMO_VENDOR),
        hash_password(vendor_password),
    )

    categories = CategoryRepository(db)
    category_ids = {}
    for name, icon in CATEGORIES:
        category = categories.create(CategoryCreate(name=name, icon=icon, color_class=CATEGORY_COLOR))
        category_ids[name] = category.id

    stores = StoreRepository(db)
    store_ids = [
        stores.create(vendor.id, StoreCreate(location=STORE_LOCATION, **store)).id
        for store in STORES
    ]

    products = ProductRepository(db)
    for store_index, category, name, description, price, unit, stock, sku in PRODUCTS:
        products.create(ProductCreate(
            store_id=store_ids[store_index],
            category_id=category_ids[category],
            name=name,
            description=description,
            price=Decimal(price),
            unit=unit,
            stock=stock,
            sku=sku,
        ))

    logger.info(
        f"Seeded sample data: 1 vendor, {len(CATEGORIES)} categories, "
        f"{len(STORES)} stores, {len(PRODUCTS)} products"
    )
    return True
