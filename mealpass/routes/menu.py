"""
MealPass API - Menu Routes.

Public weekly menu with role-specific prices, plus admin menu management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from mealpass.dependencies import get_optional_user, require_admin
from mealpass.models.enums import DayOfWeek, DietaryTag, MealType
from mealpass.models.mongodb import MenuItemDocument, UserDocument
from mealpass.schemas.menu import MenuItemCreate, MenuItemUpdate
from mealpass.services import menu_service
from mealpass.services.pricing import priced_menu

router = APIRouter()


def _admin_view(item: MenuItemDocument) -> dict:
    """Admin representation, showing the stored base price."""
    return {
        "id": str(item.uid),
        "day": item.day.value,
        "meal_type": item.meal_type.value,
        "name": item.name,
        "description": item.description,
        "dietary_tags": [tag.value for tag in item.dietary_tags],
        "calories": item.calories,
        "price": item.price,
        "updated_at": item.updated_at.isoformat(),
    }


@router.get("")
async def get_menu(
    day: Optional[DayOfWeek] = None,
    meal_type: Optional[MealType] = None,
    tag: Optional[DietaryTag] = None,
    user: Optional[UserDocument] = Depends(get_optional_user),
):
    """
    Weekly menu priced for the caller.

    Staff see staff prices; students, admins and anonymous visitors see the
    standard prices.
    """
    items = await menu_service.list_menu_items(day=day, meal_type=meal_type, tag=tag)
    role = user.role if user else None
    return {
        "role": role.value if role else None,
        "items": priced_menu(items, role),
    }


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: MenuItemCreate,
    admin: UserDocument = Depends(require_admin),
):
    item = await menu_service.create_menu_item(data.model_dump())
    return _admin_view(item)


@router.get("/items/{item_id}")
async def get_item(item_id: str, admin: UserDocument = Depends(require_admin)):
    return _admin_view(await menu_service.get_menu_item(item_id))


@router.patch("/items/{item_id}")
async def update_item(
    item_id: str,
    data: MenuItemUpdate,
    admin: UserDocument = Depends(require_admin),
):
    """Partial update. Only fields present in the body change."""
    item = await menu_service.update_menu_item(item_id, data.model_dump(exclude_unset=True))
    return _admin_view(item)


@router.delete("/items/{item_id}")
async def delete_item(item_id: str, admin: UserDocument = Depends(require_admin)):
    """Remove an item from the menu. Past orders keep their snapshots."""
    await menu_service.delete_menu_item(item_id)
    return {"message": "Menu item deleted", "id": item_id}
