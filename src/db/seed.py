# seed catalog and accounts restored by reset_data()
from decimal import Decimal
from typing import Dict, List

from db.models import Product, User

_IMG = "https://images.unsplash.com/photo-{}?w=400&h=400&fit=crop"

SEED_PRODUCTS: List[Product] = [
    Product("1", "Wireless Bluetooth Headphones", Decimal("99.99"),
            "Premium quality wireless headphones with noise cancellation and 30-hour battery life.",
            _IMG.format("1505740420928-5e560c06d30e"), "Electronics", 15),
    Product("2", "Organic Cotton T-Shirt", Decimal("29.99"),
            "Soft, breathable organic cotton t-shirt available in multiple colors.",
            _IMG.format("1521572163474-6864f9cf17ab"), "Clothing", 25),
    Product("3", "Stainless Steel Water Bottle", Decimal("24.99"),
            "Insulated stainless steel water bottle that keeps drinks cold for 24 hours.",
            _IMG.format("1602143407151-7111542de6e8"), "Home & Garden", 30),
    Product("4", "Mechanical Gaming Keyboard", Decimal("129.99"),
            "RGB backlit mechanical keyboard with blue switches and programmable keys.",
            _IMG.format("1541140532154-b024d705b90a"), "Electronics", 8),
    Product("5", "Yoga Mat Premium", Decimal("49.99"),
            "Non-slip yoga mat with extra cushioning and alignment lines.",
            _IMG.format("1544367567-0f2fcb009e0b"), "Sports & Fitness", 20),
    Product("6", "Coffee Beans - Dark Roast", Decimal("16.99"),
            "Premium dark roast coffee beans sourced from sustainable farms.",
            _IMG.format("1559056199-641a0ac8b55e"), "Food & Beverage", 45),
    Product("7", "Leather Crossbody Bag", Decimal("89.99"),
            "Genuine leather crossbody bag with adjustable strap and multiple compartments.",
            _IMG.format("1553062407-98eeb64c6a62"), "Accessories", 12),
    Product("8", "Smart Fitness Watch", Decimal("199.99"),
            "Advanced fitness tracking with heart rate monitor and GPS.",
            _IMG.format("1523275335684-37898b6baf30"), "Electronics", 18),
    Product("9", "Ceramic Plant Pot Set", Decimal("34.99"),
            "Set of 3 ceramic plant pots with drainage holes and saucers.",
            _IMG.format("1485955900006-10f4d324d411"), "Home & Garden", 22),
    Product("10", "Wireless Phone Charger", Decimal("39.99"),
            "Fast wireless charging pad compatible with all Qi-enabled devices.",
            _IMG.format("1583394838336-acd977736f90"), "Electronics", 35),
    Product("11", "Denim Jacket Classic", Decimal("79.99"),
            "Timeless denim jacket with a comfortable fit and vintage wash.",
            _IMG.format("1551537482-f2075a1d41f2"), "Clothing", 16),
    Product("12", "Essential Oil Diffuser", Decimal("54.99"),
            "Ultrasonic aromatherapy diffuser with color-changing LED lights.",
            _IMG.format("1544947950-fa07a98d237f"), "Home & Garden", 28),
    Product("13", "Protein Powder Vanilla", Decimal("44.99"),
            "Whey protein powder with 25g protein per serving and natural vanilla flavor.",
            _IMG.format("1593095948071-474c5cc2989d"), "Sports & Fitness", 33),
    Product("14", "Artisan Tea Collection", Decimal("32.99"),
            "Premium tea sampler with 12 different artisan blends.",
            _IMG.format("1556909114-f6e7ad7d3136"), "Food & Beverage", 19),
    Product("15", "Minimalist Watch", Decimal("149.99"),
            "Elegant minimalist watch with leather strap and Swiss movement.",
            _IMG.format("1524805444758-089113d48a6d"), "Accessories", 11),
]

SEED_USERS: List[User] = [
    User(id="1", email="admin@test.com", name="Admin User", role="admin"),
    User(id="2", email="user@test.com", name="Test Customer", role="customer"),
]

# demo accounts only; passwords are compared in plain text
CREDENTIALS: Dict[str, str] = {
    "admin@test.com": "admin123",
    "user@test.com": "user123",
}

CATEGORIES: List[str] = [
    "All",
    "Electronics",
    "Clothing",
    "Home & Garden",
    "Sports & Fitness",
    "Food & Beverage",
    "Accessories",
]
