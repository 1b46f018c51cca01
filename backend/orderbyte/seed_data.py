# Overview: The canonical seed dataset loaded into a fresh store at startup.

"""
Seed data

Two demo restaurants with one active menu each, two sample orders, one staff
login per restaurant and one platform admin.

Money is an integer count of minor currency units (MWK tambala by default).

Default Credentials (CHANGE IN PRODUCTION!):
   superadmin@orderbyte.com / Admin123!
   manager@bellavista.com   / Staff123!   (Bella Vista, manager)
   admin@urbancafe.com      / Staff123!   (Urban Café, admin)
"""

from __future__ import annotations

from datetime import timedelta

from .extensions import db
from .models import (
    Menu,
    MenuCategory,
    MenuItem,
    Order,
    OrderLine,
    Organization,
    PlatformAdmin,
    StaffUser,
)
from .services.auth_service import hash_password
from .services.concurrency import serialized
from .services.organization_service import DEFAULT_SETTINGS
from .time_utils import utcnow


STAFF_PASSWORD = "Staff123!"
SUPERADMIN_PASSWORD = "Admin123!"

ORGANIZATIONS = [
    {
        "id": "bella-vista",
        "name": "Bella Vista Restaurant",
        "theme": {"primaryColor": "#2d3748", "secondaryColor": "#4a5568", "accentColor": "#f6ad55"},
        "contact": {"phone": "+1 (555) 123-4567", "website": "www.bellavista.com"},
    },
    {
        "id": "urban-cafe",
        "name": "Urban Café",
        "theme": {"primaryColor": "#1a202c", "secondaryColor": "#2d3748", "accentColor": "#68d391"},
        "contact": {"phone": "+1 (555) 987-6543", "website": "www.urbancafe.com"},
    },
]

MENUS = [
    {
        "id": "bella-vista-main",
        "organization_id": "bella-vista",
        "name": "Main Menu",
        "categories": [
            {
                "id": "mains",
                "name": "Main Courses",
                "items": [
                    {
                        "id": "margherita",
                        "name": "Margherita Pizza",
                        "description": "Fresh tomato sauce, mozzarella, basil, olive oil",
                        "price": 27690,
                        "dietary": ["vegetarian"],
                    },
                    {
                        "id": "carbonara",
                        "name": "Pasta Carbonara",
                        "description": "Creamy pasta with pancetta, egg, and parmesan",
                        "price": 30970,
                    },
                ],
            },
            {
                "id": "desserts",
                "name": "Desserts",
                "items": [
                    {
                        "id": "tiramisu",
                        "name": "Tiramisu",
                        "description": "Classic Italian dessert with coffee and mascarpone",
                        "price": 14650,
                        "dietary": ["vegetarian"],
                    },
                ],
            },
        ],
    },
    {
        "id": "urban-cafe-all-day",
        "organization_id": "urban-cafe",
        "name": "All Day Menu",
        "categories": [
            {
                "id": "food",
                "name": "Food",
                "items": [
                    {
                        "id": "avocado-toast",
                        "name": "Avocado Toast",
                        "description": "Sourdough bread with smashed avocado, lime, and sea salt",
                        "price": 21170,
                        "dietary": ["vegan", "dairy-free"],
                    },
                    {
                        "id": "acai-bowl",
                        "name": "Acai Bowl",
                        "description": "Açaí with granola, berries, and coconut flakes",
                        "price": 24430,
                        "dietary": ["vegan", "gluten-free", "dairy-free"],
                    },
                ],
            },
            {
                "id": "beverages",
                "name": "Beverages",
                "items": [
                    {
                        "id": "cappuccino",
                        "name": "Cappuccino",
                        "description": "Rich espresso with steamed milk foam",
                        "price": 8130,
                        "dietary": ["vegetarian"],
                    },
                ],
            },
        ],
    },
]

# (item_id, quantity); names and prices are copied from the menu above
ORDERS = [
    {
        "id": "order-1",
        "organization_id": "bella-vista",
        "customer_name": "Sarah Johnson",
        "table_number": "12",
        "lines": [("margherita", 1), ("carbonara", 1)],
        "status": "preparing",
        "minutes_ago": 15,
    },
    {
        "id": "order-2",
        "organization_id": "urban-cafe",
        "customer_name": "Mike Chen",
        "table_number": "5",
        "lines": [("avocado-toast", 2), ("cappuccino", 1)],
        "status": "ready",
        "minutes_ago": 8,
    },
]

STAFF = [
    {
        "id": "staff-1",
        "organization_id": "bella-vista",
        "email": "manager@bellavista.com",
        "name": "John Manager",
        "role": "manager",
    },
    {
        "id": "staff-2",
        "organization_id": "urban-cafe",
        "email": "admin@urbancafe.com",
        "name": "Sarah Admin",
        "role": "admin",
    },
]

SUPERADMINS = [
    {"id": "superadmin-1", "email": "superadmin@orderbyte.com", "name": "Super Admin"},
]


def _seed_menus(now) -> dict[str, MenuItem]:
    items_by_id: dict[str, MenuItem] = {}
    for row in MENUS:
        menu = Menu(
            id=row["id"],
            organization_id=row["organization_id"],
            name=row["name"],
            is_active=True,
            updated_at=now,
        )
        for c_index, c_spec in enumerate(row["categories"], start=1):
            category = MenuCategory(id=c_spec["id"], name=c_spec["name"], sort_order=c_index)
            for i_index, i_spec in enumerate(c_spec["items"], start=1):
                item = MenuItem(
                    id=i_spec["id"],
                    name=i_spec["name"],
                    description=i_spec["description"],
                    price=i_spec["price"],
                    dietary=list(i_spec.get("dietary", [])),
                    allergens=[],
                    available=True,
                    sort_order=i_index,
                )
                category.items.append(item)
                items_by_id[item.id] = item
            menu.categories.append(category)
        db.session.add(menu)
    return items_by_id


def _seed_orders(now, items_by_id: dict[str, MenuItem]) -> None:
    for row in ORDERS:
        created = now - timedelta(minutes=row["minutes_ago"])
        order = Order(
            id=row["id"],
            organization_id=row["organization_id"],
            customer_name=row["customer_name"],
            table_number=row["table_number"],
            status=row["status"],
            created_at=created,
            updated_at=created,
        )
        total = 0
        for position, (item_id, qty) in enumerate(row["lines"]):
            item = items_by_id[item_id]
            order.lines.append(OrderLine(
                position=position,
                item_id=item.id,
                name=item.name,
                price=item.price,
                quantity=qty,
            ))
            total += item.price * qty
        order.total_amount = total
        db.session.add(order)


@serialized
def load_seed_data() -> bool:
    """
    Load the seed dataset into an empty store.

    Idempotent: returns False without touching anything when organizations
    already exist.
    """
    if db.session.query(Organization.id).first() is not None:
        return False

    now = utcnow()
    for row in ORGANIZATIONS:
        db.session.add(Organization(
            id=row["id"],
            name=row["name"],
            theme=dict(row["theme"]),
            contact=dict(row["contact"]),
            settings=dict(DEFAULT_SETTINGS),
            is_active=True,
            created_at=now,
            updated_at=now,
        ))
    db.session.flush()

    items_by_id = _seed_menus(now)
    db.session.flush()
    _seed_orders(now, items_by_id)

    staff_hash = hash_password(STAFF_PASSWORD)
    for row in STAFF:
        db.session.add(StaffUser(password_hash=staff_hash, created_at=now, updated_at=now, **row))

    admin_hash = hash_password(SUPERADMIN_PASSWORD)
    for row in SUPERADMINS:
        db.session.add(PlatformAdmin(password_hash=admin_hash, is_active=True, created_at=now, **row))

    db.session.flush()
    return True
