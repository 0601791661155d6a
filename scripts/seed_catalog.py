from decimal import Decimal
from smm_panel.core.database import SessionLocal
from smm_panel.models import Category, Service


SAMPLE_CATALOG = [
    {
        "category": "Instagram",
        "description": "Followers, likes and views for Instagram",
        "services": [
            {
                "name": "Instagram Followers",
                "api_service_id": "IG_FOLLOWERS",
                "price": Decimal("0.0100"),
                "reseller_price": Decimal("0.0080"),
                "min_quantity": 100,
                "max_quantity": 10000,
                "speed": "fast",
            },
            {
                "name": "Instagram Likes",
                "api_service_id": "IG_LIKES",
                "price": Decimal("0.0050"),
                "reseller_price": Decimal("0.0040"),
                "min_quantity": 50,
                "max_quantity": 50000,
                "speed": "instant",
            },
        ],
    },
    {
        "category": "YouTube",
        "description": "Views and subscribers for YouTube",
        "services": [
            {
                "name": "YouTube Views",
                "api_service_id": "YT_VIEWS",
                "price": Decimal("0.0030"),
                "reseller_price": Decimal("0.0025"),
                "min_quantity": 500,
                "max_quantity": 100000,
                "speed": "medium",
            },
        ],
    },
]


def main():
    db = SessionLocal()
    try:
        for entry in SAMPLE_CATALOG:
            category = db.query(Category).filter(Category.name == entry["category"]).first()
            if not category:
                category = Category(name=entry["category"], description=entry["description"], status="active")
                db.add(category)
                db.flush()
            for service in entry["services"]:
                existing = db.query(Service).filter(Service.api_service_id == service["api_service_id"]).first()
                if not existing:
                    db.add(Service(category_id=category.id, status="active", **service))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
