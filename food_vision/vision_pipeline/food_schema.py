"""
Built-in food nutrition lookup table.

Used when the packaged ``food_kbzu.json`` cannot be loaded. Keys are class
names as the detector reports them (normalized at load time).

Values are approximate macros per 100g:
- calories (kcal)
- protein (g)
- fat (g)
- carbs (g)
"""

FOOD_NUTRITION = {
    # Fruits
    "apple": {"calories": 52, "protein": 0.3, "fat": 0.2, "carbs": 14.0},
    "banana": {"calories": 89, "protein": 1.1, "fat": 0.3, "carbs": 23.0},
    "orange": {"calories": 47, "protein": 0.9, "fat": 0.1, "carbs": 12.0},
    "grape": {"calories": 69, "protein": 0.7, "fat": 0.2, "carbs": 18.0},
    "strawberry": {"calories": 32, "protein": 0.7, "fat": 0.3, "carbs": 8.0},
    "watermelon": {"calories": 30, "protein": 0.6, "fat": 0.2, "carbs": 8.0},
    "pineapple": {"calories": 50, "protein": 0.5, "fat": 0.1, "carbs": 13.0},
    "peach": {"calories": 39, "protein": 0.9, "fat": 0.3, "carbs": 10.0},
    "pear": {"calories": 57, "protein": 0.4, "fat": 0.1, "carbs": 15.0},

    # Vegetables
    "tomato": {"calories": 18, "protein": 0.9, "fat": 0.2, "carbs": 4.0},
    "cucumber": {"calories": 15, "protein": 0.7, "fat": 0.1, "carbs": 4.0},
    "carrot": {"calories": 41, "protein": 0.9, "fat": 0.2, "carbs": 10.0},
    "broccoli": {"calories": 34, "protein": 2.8, "fat": 0.4, "carbs": 7.0},
    "cabbage": {"calories": 25, "protein": 1.3, "fat": 0.1, "carbs": 6.0},
    "potato": {"calories": 77, "protein": 2.0, "fat": 0.1, "carbs": 17.0},
    "bell pepper": {"calories": 31, "protein": 1.0, "fat": 0.3, "carbs": 6.0},
    "pumpkin": {"calories": 26, "protein": 1.0, "fat": 0.1, "carbs": 7.0},

    # Dishes
    "pizza": {"calories": 266, "protein": 11.0, "fat": 10.0, "carbs": 33.0},
    "hamburger": {"calories": 295, "protein": 17.0, "fat": 14.0, "carbs": 24.0},
    "sandwich": {"calories": 250, "protein": 12.0, "fat": 8.0, "carbs": 32.0},
    "pasta": {"calories": 158, "protein": 5.5, "fat": 0.9, "carbs": 31.0},
    "salad": {"calories": 45, "protein": 1.5, "fat": 2.5, "carbs": 5.0},
    "burrito": {"calories": 206, "protein": 9.0, "fat": 8.0, "carbs": 25.0},
    "sushi": {"calories": 143, "protein": 6.0, "fat": 1.0, "carbs": 28.0},
    "hot dog": {"calories": 290, "protein": 10.0, "fat": 18.0, "carbs": 22.0},

    # Bread & pastry
    "bread": {"calories": 265, "protein": 9.0, "fat": 3.2, "carbs": 49.0},
    "bagel": {"calories": 257, "protein": 10.0, "fat": 1.4, "carbs": 50.0},
    "croissant": {"calories": 406, "protein": 8.2, "fat": 21.0, "carbs": 46.0},
    "doughnut": {"calories": 452, "protein": 5.2, "fat": 25.0, "carbs": 51.0},
    "muffin": {"calories": 377, "protein": 6.0, "fat": 17.0, "carbs": 51.0},
    "pancake": {"calories": 227, "protein": 6.1, "fat": 3.9, "carbs": 41.0},
    "waffle": {"calories": 291, "protein": 5.9, "fat": 9.3, "carbs": 47.0},
    "cookie": {"calories": 502, "protein": 5.9, "fat": 24.0, "carbs": 67.0},

    # Dairy
    "cheese": {"calories": 402, "protein": 25.0, "fat": 33.0, "carbs": 1.3},
    "milk": {"calories": 61, "protein": 3.2, "fat": 3.3, "carbs": 4.8},

    # Meat, fish & eggs
    "chicken": {"calories": 165, "protein": 31.0, "fat": 3.6, "carbs": 0.0},
    "fish": {"calories": 120, "protein": 20.0, "fat": 4.0, "carbs": 2.5},
    "egg (food)": {"calories": 155, "protein": 13.0, "fat": 11.0, "carbs": 1.1},

    # Drinks
    "coffee": {"calories": 2, "protein": 0.3, "fat": 0.1, "carbs": 0.0},
    "tea": {"calories": 1, "protein": 0.0, "fat": 0.0, "carbs": 0.3},
    "juice": {"calories": 45, "protein": 0.5, "fat": 0.1, "carbs": 11.0},

    # Desserts & snacks
    "ice cream": {"calories": 207, "protein": 3.5, "fat": 11.0, "carbs": 24.0},
    "cake": {"calories": 257, "protein": 4.5, "fat": 7.0, "carbs": 46.0},
    "french fries": {"calories": 312, "protein": 3.4, "fat": 15.0, "carbs": 41.0},
    "popcorn": {"calories": 387, "protein": 13.0, "fat": 4.5, "carbs": 78.0},

    # Generic
    "food": {"calories": 150, "protein": 10.0, "fat": 7.0, "carbs": 15.0},
    "unknown": {"calories": 150, "protein": 10.0, "fat": 7.0, "carbs": 15.0},
}

# Last-resort entry; guarantees a lookup never fails.
UNKNOWN_KEY = "unknown"
UNKNOWN_NUTRITION = {"calories": 150, "protein": 10.0, "fat": 7.0, "carbs": 15.0}
