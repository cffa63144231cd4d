# data/catalog.py
"""
Curated gift catalog (INR)
Inserted at startup when the catalog is empty; used by "load more".
"""

from typing import List, Dict, Any
from sqlalchemy.exc import SQLAlchemyError
from loguru import logger

from giftai.interfaces.storage import GiftStorage
from giftai.schemas.gift_schemas import ProductSource
from giftai.schemas.tables import GiftProduct


_EVERYONE = ["friend", "partner", "sibling", "mother", "father", "colleague"]
_CELEBRATIONS = ["Birthday", "Anniversary", "Diwali", "Just Because"]

SEED_PRODUCTS: List[Dict[str, Any]] = [
    # Cricket
    {
        "name": "Kashmir Willow Cricket Bat",
        "description": "Full-size Kashmir willow bat with a cane handle, knocked-in and ready for weekend matches.",
        "category": "Sports",
        "price_min": 1200, "price_max": 1800,
        "interests": ["Cricket"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": ["friend", "sibling", "partner"],
        "tags": ["outdoor", "bestseller"],
    },
    {
        "name": "Cricket Kit Bag with Wheels",
        "description": "Roomy duffle kit bag with a separate bat compartment and trolley wheels.",
        "category": "Sports",
        "price_min": 1500, "price_max": 2000,
        "interests": ["Cricket"],
        "occasions": ["Birthday", "Graduation"],
        "relationships": ["friend", "sibling"],
        "tags": ["travel", "practical"],
    },
    {
        "name": "Autographed Cricket Ball Display Case",
        "description": "Acrylic display cube with a replica signed match ball for the cricket memorabilia shelf.",
        "category": "Collectibles",
        "price_min": 800, "price_max": 1200,
        "interests": ["Cricket"],
        "occasions": ["Birthday", "Anniversary", "Just Because"],
        "relationships": ["friend", "father", "partner"],
        "tags": ["memorabilia", "decor"],
    },
    {
        "name": "Batting Gloves Pro Series",
        "description": "Lightweight batting gloves with split-finger protection and breathable mesh.",
        "category": "Sports",
        "price_min": 700, "price_max": 1100,
        "interests": ["Cricket"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": ["friend", "sibling"],
        "tags": ["protective gear"],
    },
    {
        "name": "Cricket Legends Coffee Table Book",
        "description": "Illustrated history of the greatest cricketers and matches, hardcover edition.",
        "category": "Books",
        "price_min": 900, "price_max": 1400,
        "interests": ["Cricket", "Reading"],
        "occasions": ["Birthday", "Diwali", "Just Because"],
        "relationships": ["friend", "father", "colleague"],
        "tags": ["books", "history"],
    },
    # Technology & Gaming
    {
        "name": "Wireless Noise Cancelling Earbuds",
        "description": "True wireless earbuds with active noise cancellation and 30-hour battery.",
        "category": "Electronics",
        "price_min": 1800, "price_max": 3500,
        "interests": ["Technology", "Music", "Travel"],
        "occasions": _CELEBRATIONS,
        "relationships": _EVERYONE,
        "tags": ["audio", "wireless"],
    },
    {
        "name": "Smart Fitness Band",
        "description": "Heart-rate, sleep and SpO2 tracking band with two-week battery life.",
        "category": "Electronics",
        "price_min": 1500, "price_max": 2500,
        "interests": ["Technology", "Fitness"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": _EVERYONE,
        "tags": ["wearable", "health"],
    },
    {
        "name": "RGB Mechanical Gaming Keyboard",
        "description": "Hot-swappable mechanical keyboard with per-key RGB lighting.",
        "category": "Gaming",
        "price_min": 2500, "price_max": 4500,
        "interests": ["Gaming", "Technology"],
        "occasions": ["Birthday", "Graduation"],
        "relationships": ["friend", "sibling", "partner"],
        "tags": ["gaming", "pc"],
    },
    {
        "name": "Gaming Headset with Surround Sound",
        "description": "Over-ear headset with a detachable boom mic and 7.1 virtual surround.",
        "category": "Gaming",
        "price_min": 1500, "price_max": 3000,
        "interests": ["Gaming"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": ["friend", "sibling"],
        "tags": ["gaming", "audio"],
    },
    # Reading & Art
    {
        "name": "Kindle Paperwhite",
        "description": "Glare-free e-reader with adjustable warm light and weeks of battery.",
        "category": "Electronics",
        "price_min": 9000, "price_max": 14000,
        "interests": ["Reading", "Technology", "Travel"],
        "occasions": _CELEBRATIONS,
        "relationships": _EVERYONE,
        "tags": ["books", "e-reader"],
    },
    {
        "name": "Personalised Leather Bookmark Set",
        "description": "Set of three hand-stitched leather bookmarks with custom initials.",
        "category": "Stationery",
        "price_min": 350, "price_max": 600,
        "interests": ["Reading"],
        "occasions": ["Birthday", "Just Because", "Graduation"],
        "relationships": ["friend", "colleague", "mother"],
        "tags": ["personalized"],
    },
    {
        "name": "Professional Watercolour Art Kit",
        "description": "48 artist-grade watercolour pans, brushes and a cold-press sketchbook.",
        "category": "Art Supplies",
        "price_min": 1200, "price_max": 2200,
        "interests": ["Art"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": _EVERYONE,
        "tags": ["creative"],
    },
    # Cooking, Coffee & Tea
    {
        "name": "Cast Iron Tawa and Kadai Combo",
        "description": "Pre-seasoned cast iron cookware pair for everyday Indian cooking.",
        "category": "Kitchen",
        "price_min": 1400, "price_max": 2200,
        "interests": ["Cooking"],
        "occasions": ["Diwali", "Housewarming", "Anniversary"],
        "relationships": ["mother", "partner", "friend"],
        "tags": ["kitchen", "durable"],
    },
    {
        "name": "Spice Box Masala Dabba",
        "description": "Stainless steel masala dabba with seven bowls and a glass lid.",
        "category": "Kitchen",
        "price_min": 450, "price_max": 900,
        "interests": ["Cooking"],
        "occasions": ["Diwali", "Housewarming", "Just Because"],
        "relationships": ["mother", "friend", "colleague"],
        "tags": ["kitchen", "traditional"],
    },
    {
        "name": "Pour-Over Coffee Starter Kit",
        "description": "Glass dripper, gooseneck kettle and single-origin Coorg beans.",
        "category": "Kitchen",
        "price_min": 1800, "price_max": 3000,
        "interests": ["Coffee"],
        "occasions": ["Birthday", "Anniversary", "Just Because"],
        "relationships": ["friend", "partner", "colleague"],
        "tags": ["coffee", "gourmet"],
    },
    {
        "name": "Darjeeling First Flush Tea Hamper",
        "description": "Three premium loose-leaf teas with an infuser mug in a gift box.",
        "category": "Gourmet",
        "price_min": 900, "price_max": 1500,
        "interests": ["Tea"],
        "occasions": ["Diwali", "Birthday", "Just Because"],
        "relationships": ["mother", "father", "colleague", "friend"],
        "tags": ["gourmet", "hamper"],
    },
    # Fitness & Outdoors
    {
        "name": "Premium Yoga Mat with Strap",
        "description": "6mm anti-slip TPE yoga mat with alignment lines and carry strap.",
        "category": "Fitness",
        "price_min": 800, "price_max": 1500,
        "interests": ["Yoga", "Fitness"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": _EVERYONE,
        "tags": ["wellness"],
    },
    {
        "name": "Adjustable Dumbbell Set",
        "description": "Space-saving adjustable dumbbells from 2.5 to 12 kg.",
        "category": "Fitness",
        "price_min": 3000, "price_max": 5500,
        "interests": ["Fitness"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": ["friend", "partner", "sibling"],
        "tags": ["home gym"],
    },
    {
        "name": "Badminton Racket Pair with Shuttles",
        "description": "Two carbon-shaft rackets, a tube of feather shuttles and a carry cover.",
        "category": "Sports",
        "price_min": 1200, "price_max": 2000,
        "interests": ["Badminton"],
        "occasions": ["Birthday", "Just Because"],
        "relationships": ["friend", "sibling", "partner"],
        "tags": ["outdoor"],
    },
    {
        "name": "Indoor Herb Garden Kit",
        "description": "Self-watering planter with basil, mint and coriander seed pods.",
        "category": "Home & Garden",
        "price_min": 700, "price_max": 1300,
        "interests": ["Gardening", "Cooking"],
        "occasions": ["Housewarming", "Birthday", "Just Because"],
        "relationships": _EVERYONE,
        "tags": ["eco-friendly"],
    },
    # Music, Photography & Travel
    {
        "name": "Portable Bluetooth Speaker",
        "description": "Waterproof speaker with deep bass and 12-hour playback.",
        "category": "Electronics",
        "price_min": 1500, "price_max": 2500,
        "interests": ["Music", "Travel"],
        "occasions": _CELEBRATIONS,
        "relationships": _EVERYONE,
        "tags": ["audio", "outdoor"],
    },
    {
        "name": "Smartphone Photography Kit",
        "description": "Clip-on wide and macro lenses, a mini tripod and a ring light.",
        "category": "Photography",
        "price_min": 1000, "price_max": 1800,
        "interests": ["Photography", "Travel"],
        "occasions": ["Birthday", "Graduation", "Just Because"],
        "relationships": ["friend", "sibling", "partner"],
        "tags": ["creative"],
    },
    {
        "name": "Anti-Theft Travel Backpack",
        "description": "Water-resistant backpack with a hidden zip, USB port and laptop sleeve.",
        "category": "Travel",
        "price_min": 1600, "price_max": 2800,
        "interests": ["Travel", "Technology"],
        "occasions": ["Birthday", "Graduation"],
        "relationships": _EVERYONE,
        "tags": ["travel", "practical"],
    },
    {
        "name": "Classic Analog Leather Watch",
        "description": "Minimal dial watch with a genuine leather strap, gift boxed.",
        "category": "Fashion",
        "price_min": 2500, "price_max": 6000,
        "interests": ["Fashion"],
        "occasions": ["Anniversary", "Birthday", "Diwali"],
        "relationships": ["partner", "father", "friend"],
        "tags": ["accessories"],
    },
]


def seed_catalog(storage: GiftStorage) -> int:
    """
    Insert the curated catalog when no catalog products exist yet

    Returns:
        int: number of products inserted (0 when already seeded)
    """
    existing = storage.count_products(source=ProductSource.CATALOG.value)
    if existing > 0:
        logger.info(f"Catalog already holds {existing} products, skipping seed")
        return 0

    seeded = 0
    for data in SEED_PRODUCTS:
        try:
            fields = {k: list(v) if isinstance(v, list) else v for k, v in data.items()}
            storage.create_product(GiftProduct(source=ProductSource.CATALOG.value, **fields))
            seeded += 1
        except SQLAlchemyError as e:
            logger.error(f"Failed to seed product {data['name']}: {e}")

    logger.info(f"Seeded {seeded} catalog products")
    return seeded
