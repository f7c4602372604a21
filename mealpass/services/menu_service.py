"""
MealPass API - Catalog Store.

Admin CRUD over weekly menu items. Orders keep their own item snapshots,
so deleting an item here never touches order history.
"""

import logging
from typing import Any, Dict, List, Optional

from beanie.operators import In

from mealpass.models.enums import DayOfWeek, DietaryTag, MealType
from mealpass.models.mongodb import MenuItemDocument
from mealpass.services.pricing import STANDARD_PRICES
from mealpass.utils.clock import utc_now
from mealpass.utils.errors import NotFoundError, ValidationError
from mealpass.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("day", "meal_type", "name", "description", "dietary_tags", "calories", "price")


def _validate_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check business rules on (possibly partial) menu item data.

    Raises:
        ValidationError: On empty name, non-text description or negative
            calories/price. A null description is stored as empty.
    """
    cleaned = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}

    if "name" in cleaned:
        name = (cleaned["name"] or "").strip()
        if not name:
            raise ValidationError("Menu item name is required")
        cleaned["name"] = name
    if "description" in cleaned:
        if cleaned["description"] is None:
            cleaned["description"] = ""
        elif not isinstance(cleaned["description"], str):
            raise ValidationError("Description must be text")
    if "calories" in cleaned and (cleaned["calories"] is None or cleaned["calories"] < 0):
        raise ValidationError("Calories must be a non-negative integer")
    if "price" in cleaned and (cleaned["price"] is None or cleaned["price"] < 0):
        raise ValidationError("Price must be non-negative")

    try:
        if "day" in cleaned:
            cleaned["day"] = DayOfWeek(cleaned["day"])
        if "meal_type" in cleaned:
            cleaned["meal_type"] = MealType(cleaned["meal_type"])
        if "dietary_tags" in cleaned:
            cleaned["dietary_tags"] = [DietaryTag(tag) for tag in cleaned["dietary_tags"] or []]
    except ValueError as e:
        raise ValidationError("Invalid menu item field", detail=str(e))

    return cleaned


async def create_menu_item(data: Dict[str, Any]) -> MenuItemDocument:
    """
    Create a menu item.

    Args:
        data: Field values (day, meal_type, name, description, dietary_tags,
            calories, price).

    Returns:
        MenuItemDocument: The stored item.
    """
    cleaned = _validate_fields(data)
    missing = [field for field in ("day", "meal_type", "name") if field not in cleaned]
    if missing:
        raise ValidationError("Missing required fields", detail=", ".join(missing))

    now = utc_now()
    item = MenuItemDocument(**cleaned, created_at=now, updated_at=now)
    await item.insert()
    logger.info(f"Menu item created: {item.uid} ({item.name})")
    return item


async def list_menu_items(
    day: Optional[DayOfWeek] = None,
    meal_type: Optional[MealType] = None,
    tag: Optional[DietaryTag] = None,
) -> List[MenuItemDocument]:
    """List menu items ordered by name, optionally filtered."""
    filters = []
    if day:
        filters.append(MenuItemDocument.day == DayOfWeek(day))
    if meal_type:
        filters.append(MenuItemDocument.meal_type == MealType(meal_type))
    if tag:
        filters.append(MenuItemDocument.dietary_tags == DietaryTag(tag))

    return await MenuItemDocument.find(*filters).sort(+MenuItemDocument.name).to_list()


async def get_menu_item(item_id: str) -> MenuItemDocument:
    uid = parse_uuid(item_id)
    item = await MenuItemDocument.find_one(MenuItemDocument.uid == uid) if uid else None
    if not item:
        raise NotFoundError("Menu item not found", detail=f"No menu item with id {item_id}")
    return item


async def get_menu_items_by_ids(item_ids: List[str]) -> Dict[str, MenuItemDocument]:
    """
    Load several menu items keyed by their string id.

    Unknown or malformed ids are simply absent from the result.
    """
    uids = [uid for uid in (parse_uuid(item_id) for item_id in item_ids) if uid]
    if not uids:
        return {}
    items = await MenuItemDocument.find(In(MenuItemDocument.uid, uids)).to_list()
    return {str(item.uid): item for item in items}


async def update_menu_item(item_id: str, changes: Dict[str, Any]) -> MenuItemDocument:
    """Apply a partial update to a menu item."""
    item = await get_menu_item(item_id)
    cleaned = _validate_fields(changes)
    for field, value in cleaned.items():
        setattr(item, field, value)
    item.updated_at = utc_now()
    await item.save()
    logger.info(f"Menu item updated: {item.uid} fields={sorted(cleaned)}")
    return item


async def delete_menu_item(item_id: str) -> None:
    """Hard-delete a menu item. Existing orders are unaffected."""
    item = await get_menu_item(item_id)
    await item.delete()
    logger.info(f"Menu item deleted: {item.uid} ({item.name})")


DEFAULT_WEEKLY_MENU = [
    ("Monday", "Breakfast", "Scrambled Eggs & Toast", "Classic scrambled eggs with whole wheat toast.", ["Non-Veg"], 350),
    ("Monday", "Lunch", "Chicken Salad Sandwich", "Grilled chicken salad on multigrain bread.", ["Non-Veg"], 550),
    ("Monday", "Dinner", "Lentil Soup", "Hearty lentil soup with vegetables.", ["Vegan", "Vegetarian", "Gluten-Free"], 400),
    ("Tuesday", "Breakfast", "Oatmeal with Berries", "Warm oatmeal topped with mixed berries and nuts.", ["Vegan", "Vegetarian", "Gluten-Free"], 300),
    ("Tuesday", "Lunch", "Quinoa Salad", "Refreshing quinoa salad with cucumber, tomatoes, and feta.", ["Vegetarian", "Gluten-Free"], 450),
    ("Tuesday", "Dinner", "Grilled Salmon", "Salmon fillet grilled to perfection with roasted asparagus.", ["Non-Veg", "Gluten-Free"], 600),
    ("Wednesday", "Breakfast", "Pancakes", "Fluffy pancakes with maple syrup.", ["Vegetarian"], 450),
    ("Wednesday", "Lunch", "Vegetable Stir-fry", "Mixed vegetables stir-fried with tofu and soy sauce.", ["Vegan", "Vegetarian"], 500),
    ("Wednesday", "Dinner", "Spaghetti Bolognese", "Classic spaghetti with a rich meat sauce.", ["Non-Veg"], 650),
    ("Thursday", "Breakfast", "Yogurt Parfait", "Greek yogurt with granola and fresh fruits.", ["Vegetarian"], 320),
    ("Thursday", "Lunch", "Turkey Club Sandwich", "Triple-decker sandwich with turkey, bacon, lettuce, and tomato.", ["Non-Veg"], 600),
    ("Thursday", "Dinner", "Beef Tacos", "Seasoned ground beef in crispy taco shells with toppings.", ["Non-Veg"], 550),
    ("Friday", "Breakfast", "Smoothie Bowl", "Blended acai with banana, berries, and coconut flakes.", ["Vegan", "Vegetarian", "Gluten-Free"], 380),
    ("Friday", "Lunch", "Fish and Chips", "Battered cod fillets with a side of crispy fries.", ["Non-Veg"], 700),
    ("Friday", "Dinner", "Margherita Pizza", "Classic pizza with tomatoes, mozzarella, and basil.", ["Vegetarian"], 620),
    ("Saturday", "Breakfast", "Waffles with Syrup", "Crispy Belgian waffles served with butter and maple syrup.", ["Vegetarian"], 480),
    ("Saturday", "Lunch", "BBQ Pulled Pork Sandwich", "Slow-cooked pulled pork in BBQ sauce on a brioche bun.", ["Non-Veg"], 650),
    ("Saturday", "Dinner", "Chicken Alfredo", "Creamy Alfredo pasta with grilled chicken breast.", ["Non-Veg"], 720),
    ("Sunday", "Breakfast", "French Toast", "Thick-cut bread dipped in egg batter, served with berries.", ["Vegetarian"], 420),
    ("Sunday", "Lunch", "Roast Chicken with Vegetables", "Herb-roasted chicken with seasonal vegetables.", ["Non-Veg", "Gluten-Free"], 600),
    ("Sunday", "Dinner", "Shepherd's Pie", "Ground lamb and vegetables topped with mashed potatoes.", ["Non-Veg"], 680),
]


async def seed_default_menu() -> int:
    """
    Insert the default weekly menu when the catalog is empty.

    Returns:
        int: Number of items inserted (0 if the catalog already had items).
    """
    if await MenuItemDocument.find_all().count() > 0:
        return 0

    for day, meal_type, name, description, tags, calories in DEFAULT_WEEKLY_MENU:
        await create_menu_item({
            "day": day,
            "meal_type": meal_type,
            "name": name,
            "description": description,
            "dietary_tags": tags,
            "calories": calories,
            "price": STANDARD_PRICES[MealType(meal_type)],
        })

    logger.info(f"Seeded {len(DEFAULT_WEEKLY_MENU)} default menu items")
    return len(DEFAULT_WEEKLY_MENU)
