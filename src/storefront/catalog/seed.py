"""Local catalog used when the hosted catalog cannot be reached."""

SEED_PRODUCTS = [
    {
        "id": "lays-classic-45g",
        "name": "Lay's Classic",
        "brand": "Lay's",
        "category": "Papas",
        "price": 2.5,
        "wholesale_price": 2.0,
        "min_order_quantity": 12,
        "stock": 240,
        "weight": "45g",
    },
    {
        "id": "doritos-nacho-62g",
        "name": "Doritos Nacho",
        "brand": "Doritos",
        "category": "Tortillas",
        "price": 3.0,
        "wholesale_price": 2.5,
        "min_order_quantity": 12,
        "stock": 180,
        "weight": "62g",
    },
    {
        "id": "cheetos-crunchy-50g",
        "name": "Cheetos Crunchy",
        "brand": "Cheetos",
        "category": "Extruidos",
        "price": 2.0,
        "wholesale_price": 1.5,
        "min_order_quantity": 24,
        "stock": 300,
        "weight": "50g",
    },
    {
        "id": "ruffles-original-45g",
        "name": "Ruffles Original",
        "brand": "Ruffles",
        "category": "Papas",
        "price": 2.5,
        "wholesale_price": 2.0,
        "min_order_quantity": 12,
        "stock": 120,
        "weight": "45g",
    },
    {
        "id": "tostitos-salsa-300g",
        "name": "Tostitos Salsa",
        "brand": "Tostitos",
        "category": "Salsas",
        "price": 4.5,
        "wholesale_price": 3.75,
        "min_order_quantity": 6,
        "stock": 60,
        "weight": "300g",
    },
]
