"""
Populate a fresh database with demo suppliers, products and an admin account.

Run with `python seed.py`; connection settings come from the same
environment variables as the API.
"""

import os

from bson import ObjectId
from pymongo.database import Database

from database import close_db, create_document, ensure_indexes, init_db
from logger import get_logger
from schemas import Product, Supplier, User
from security import hash_password

_logger = get_logger(__name__)

SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@medbridge.com")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

DEMO_CATALOG = [
    {
        "supplier": {
            "name": "CarePoint Medical",
            "type": "Manufacturer",
            "description": "Diagnostic devices for clinics and home care.",
            "categories": ["Diagnostics", "Monitoring"],
            "website": "https://carepoint.example.com",
            "contact": {"email": "sales@carepoint.example.com", "phone": "+1 555 0100"},
        },
        "products": [
            {
                "name": "Digital Blood Pressure Monitor",
                "category": "Monitoring",
                "description": "Upper-arm monitor with irregular heartbeat detection.",
                "price": 49.99,
                "comparisonPrice": 64.99,
                "rating": 4.6,
            },
            {
                "name": "Infrared Thermometer",
                "category": "Diagnostics",
                "description": "Contactless forehead thermometer with fever alert.",
                "price": 29.5,
                "rating": 4.2,
            },
        ],
    },
    {
        "supplier": {
            "name": "SteriLine Supplies",
            "type": "Distributor",
            "description": "Disposable consumables for hospitals and labs.",
            "categories": ["Consumables"],
            "contact": {"address": "12 Harbor Road, Springfield"},
        },
        "products": [
            {
                "name": "Nitrile Examination Gloves",
                "category": "Consumables",
                "description": "Powder-free gloves, box of 100.",
                "price": 12.0,
                "inStock": False,
            },
        ],
    },
]


def ensure_admin(db: Database, email: str = SEED_ADMIN_EMAIL, password: str = SEED_ADMIN_PASSWORD) -> bool:
    """Create the admin account unless a user with that email exists. Returns True if created."""
    email = email.lower()
    if db["user"].find_one({"email": email}):
        return False
    admin = User(first_name="Site", last_name="Admin", email=email, password=hash_password(password), role="admin")
    create_document(db, "user", admin)
    _logger.info(f"Created admin account {email}")
    return True


def seed_catalog(db: Database) -> dict:
    """Insert the demo catalog into an empty supplier collection and make sure an admin exists."""
    counts = {"suppliers": 0, "products": 0, "admin_created": ensure_admin(db)}
    if db["supplier"].count_documents({}) > 0:
        _logger.info("Suppliers already present; catalog left untouched")
        return counts

    for entry in DEMO_CATALOG:
        supplier = Supplier(**entry["supplier"])
        supplier_id = create_document(db, "supplier", supplier)
        counts["suppliers"] += 1
        for item in entry["products"]:
            product = Product(supplierId=supplier_id, **item)
            doc = product.model_dump(by_alias=True, exclude_none=True)
            doc["supplierId"] = ObjectId(supplier_id)
            create_document(db, "product", doc)
            counts["products"] += 1

    _logger.info(f"Seeded {counts['suppliers']} suppliers and {counts['products']} products")
    return counts


if __name__ == "__main__":
    database = init_db()
    try:
        ensure_indexes(database)
        seed_catalog(database)
    finally:
        close_db()
