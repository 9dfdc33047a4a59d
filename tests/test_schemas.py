import unittest

from pydantic import ValidationError

from schemas import Contact, Product, Supplier, User

PRODUCT = {
    "name": "Pulse Oximeter",
    "category": "Monitoring",
    "description": "Fingertip SpO2 reader",
    "price": 19.99,
    "supplierId": "64b7f0c2a1b2c3d4e5f60718",
}

SUPPLIER = {
    "name": "CarePoint",
    "type": "Manufacturer",
    "description": "Diagnostics",
    "categories": ["Diagnostics"],
}


class ProductSchemaTestCase(unittest.TestCase):
    def test_defaults_and_aliases(self):
        product = Product(**PRODUCT)
        self.assertIs(product.in_stock, True)
        self.assertIsNone(product.rating)
        doc = product.model_dump(by_alias=True, exclude_none=True)
        self.assertEqual(doc["supplierId"], PRODUCT["supplierId"])
        self.assertIs(doc["inStock"], True)
        self.assertNotIn("comparisonPrice", doc)
        self.assertEqual(Product(**doc), product)

    def test_snake_case_names_are_accepted(self):
        product = Product(supplier_id="abc", comparison_price=25.0, **{k: v for k, v in PRODUCT.items() if k != "supplierId"})
        self.assertEqual(product.model_dump(by_alias=True)["comparisonPrice"], 25.0)

    def test_numeric_bounds(self):
        bad = [("price", -0.01), ("comparisonPrice", -1), ("rating", -0.1), ("rating", 5.1)]
        for field, value in bad:
            with self.subTest(field=field, value=value):
                with self.assertRaises(ValidationError):
                    Product(**dict(PRODUCT, **{field: value}))
        for value in (0, 5):
            self.assertEqual(Product(**dict(PRODUCT, rating=value)).rating, value)
        self.assertEqual(Product(**dict(PRODUCT, price=0)).price, 0)

    def test_required_text_fields(self):
        for field in ("name", "category", "description", "supplierId"):
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    Product(**dict(PRODUCT, **{field: "  "}))
                missing = dict(PRODUCT)
                del missing[field]
                with self.assertRaises(ValidationError):
                    Product(**missing)


class SupplierSchemaTestCase(unittest.TestCase):
    def test_categories_must_not_be_empty(self):
        with self.assertRaises(ValidationError):
            Supplier(**dict(SUPPLIER, categories=[]))
        with self.assertRaises(ValidationError):
            Supplier(**{k: v for k, v in SUPPLIER.items() if k != "categories"})

    def test_optional_contact_block(self):
        supplier = Supplier(**dict(SUPPLIER, logoUrl="https://x/logo.png", contact={"phone": "555"}))
        doc = supplier.model_dump(by_alias=True, exclude_none=True)
        self.assertEqual(doc["logoUrl"], "https://x/logo.png")
        self.assertEqual(doc["contact"], {"phone": "555"})
        self.assertNotIn("contact", Supplier(**SUPPLIER).model_dump(by_alias=True, exclude_none=True))


class UserSchemaTestCase(unittest.TestCase):
    def make(self, **overrides):
        data = {"firstName": "A", "lastName": "B", "email": "Ann@Clinic.com", "password": "$2b$10$hash"}
        data.update(overrides)
        return User(**data)

    def test_role_defaults_to_user_and_is_restricted(self):
        self.assertEqual(self.make().role, "user")
        self.assertEqual(self.make(role="admin").role, "admin")
        with self.assertRaises(ValidationError):
            self.make(role="owner")

    def test_email_is_validated_and_lowercased(self):
        self.assertEqual(self.make().email, "ann@clinic.com")
        with self.assertRaises(ValidationError):
            self.make(email="not-an-email")

    def test_names_are_stripped_and_required(self):
        user = self.make(firstName="  A ")
        self.assertEqual(user.model_dump(by_alias=True)["firstName"], "A")
        with self.assertRaises(ValidationError):
            self.make(lastName="   ")


class ContactSchemaTestCase(unittest.TestCase):
    def test_is_read_defaults_to_false(self):
        contact = Contact(name="Ann", email="ann@clinic.com", subject="Hi", message="Hello")
        self.assertEqual(contact.model_dump(by_alias=True)["isRead"], False)

    def test_blank_message_is_rejected(self):
        with self.assertRaises(ValidationError):
            Contact(name="Ann", email="ann@clinic.com", subject="Hi", message=" ")
