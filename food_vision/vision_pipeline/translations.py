"""Russian display names keyed by normalized class name."""

from types import MappingProxyType

RU_NAMES = MappingProxyType(
    {
        # Фрукты
        "apple": "Яблоко",
        "banana": "Банан",
        "orange": "Апельсин",
        "grape": "Виноград",
        "strawberry": "Клубника",
        "watermelon": "Арбуз",
        "pineapple": "Ананас",
        "peach": "Персик",
        "pear": "Груша",
        "lemon": "Лимон",
        "grapefruit": "Грейпфрут",
        "cantaloupe": "Дыня",
        "mango": "Манго",
        "pomegranate": "Гранат",
        "common_fig": "Инжир",
        # Овощи
        "tomato": "Помидор",
        "cucumber": "Огурец",
        "carrot": "Морковь",
        "broccoli": "Брокколи",
        "cabbage": "Капуста",
        "potato": "Картофель",
        "bell_pepper": "Болгарский перец",
        "pumpkin": "Тыква",
        "radish": "Редис",
        "mushroom": "Грибы",
        "artichoke": "Артишок",
        "garden_asparagus": "Спаржа",
        "squash_(plant)": "Кабачок",
        "zucchini": "Цукини",
        "vegetable": "Овощи",
        # Готовые блюда
        "pizza": "Пицца",
        "hamburger": "Гамбургер",
        "sandwich": "Сэндвич",
        "pasta": "Паста",
        "salad": "Салат",
        "burrito": "Буррито",
        "sushi": "Суши",
        "hot_dog": "Хот-дог",
        "taco": "Тако",
        "submarine_sandwich": "Сабвей",
        "french_fries": "Картофель фри",
        "fast_food": "Фастфуд",
        # Хлеб и выпечка
        "bread": "Хлеб",
        "bagel": "Бублик",
        "croissant": "Круассан",
        "doughnut": "Пончик",
        "muffin": "Маффин",
        "pancake": "Блины",
        "waffle": "Вафли",
        "cookie": "Печенье",
        "pretzel": "Крендель",
        "baked_goods": "Выпечка",
        "cake": "Торт",
        "pastry": "Пирожное",
        "tart": "Тарт",
        # Молочные продукты
        "cheese": "Сыр",
        "milk": "Молоко",
        "cream": "Сливки",
        "dairy_product": "Молочный продукт",
        # Мясо и рыба
        "chicken": "Курица",
        "fish": "Рыба",
        "seafood": "Морепродукты",
        "shrimp": "Креветки",
        "turkey": "Индейка",
        "shellfish": "Моллюски",
        "crab": "Краб",
        "lobster": "Омар",
        "oyster": "Устрица",
        "egg_(food)": "Яйцо",
        # Напитки
        "coffee": "Кофе",
        "tea": "Чай",
        "juice": "Сок",
        "beer": "Пиво",
        "wine": "Вино",
        "cocktail": "Коктейль",
        "drink": "Напиток",
        # Десерты и закуски
        "ice_cream": "Мороженое",
        "candy": "Конфеты",
        "dessert": "Десерт",
        "popcorn": "Попкорн",
        "snack": "Закуска",
        "guacamole": "Гуакамоле",
        "coconut": "Кокос",
        # Посуда
        "bowl": "Миска",
        "plate": "Тарелка",
        "fork": "Вилка",
        "spoon": "Ложка",
        "chopsticks": "Палочки",
        # Общие категории
        "food": "Еда",
        "fruit": "Фрукты",
        "unknown": "Неизвестное блюдо",
    }
)
