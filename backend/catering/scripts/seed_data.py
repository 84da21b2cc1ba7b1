"""
Sample Data Seeder

Creates a small data set for trying the Catering Order Service locally:
- An admin, an employee and a few customers (in and outside the home city)
- A handful of menus with different minimum headcounts and prices

Prints a development bearer token for each user.

Run with: python -m catering.scripts.seed_data
"""

from sqlalchemy.orm import Session

from catering.core.database import SessionLocal, engine, Base
from catering.core.security import create_access_token
from catering.models.menu import Menu
from catering.models.user import User, UserRole

# Importing the models package registers every table on Base.metadata
import catering.models  # noqa: F401


USER_DATA = [
    {"email": "admin@vitegourmand.fr", "first_name": "José", "last_name": "Martin",
     "city": "Bordeaux", "postal_address": "1 quai des Chartrons", "role": UserRole.ADMIN},
    {"email": "julie@vitegourmand.fr", "first_name": "Julie", "last_name": "Bernard",
     "city": "Bordeaux", "postal_address": "8 rue Sainte-Catherine", "role": UserRole.EMPLOYEE},
    {"email": "claire.dubois@example.com", "first_name": "Claire", "last_name": "Dubois",
     "city": "Bordeaux", "postal_address": "12 cours de l'Intendance", "role": UserRole.CUSTOMER,
     "phone": "0601020304"},
    {"email": "marc.petit@example.com", "first_name": "Marc", "last_name": "Petit",
     "city": "Mérignac", "postal_address": "45 avenue de la Marne", "role": UserRole.CUSTOMER,
     "phone": "0605060708"},
]

MENU_DATA = [
    {"title": "Menu de Noël", "description": "Foie gras, chapon aux marrons, bûche",
     "min_headcount": 6, "price_per_person": 45.0, "remaining_quantity": 20},
    {"title": "Menu de Pâques", "description": "Agneau de sept heures, légumes de saison",
     "min_headcount": 4, "price_per_person": 32.5, "remaining_quantity": 15},
    {"title": "Menu végétarien", "description": "Velouté, risotto aux cèpes, tarte fine",
     "min_headcount": 2, "price_per_person": 24.0, "remaining_quantity": 30},
    {"title": "Buffet classique", "description": "Assortiment froid et chaud",
     "min_headcount": 10, "price_per_person": 20.0, "remaining_quantity": 10},
]


def seed_users(db: Session) -> list:
    users = []
    for data in USER_DATA:
        user = db.query(User).filter(User.email == data["email"]).first()
        if not user:
            user = User(**data)
            db.add(user)
        users.append(user)
    db.commit()
    return users


def seed_menus(db: Session) -> list:
    menus = []
    for data in MENU_DATA:
        menu = db.query(Menu).filter(Menu.title == data["title"]).first()
        if not menu:
            menu = Menu(**data)
            db.add(menu)
        menus.append(menu)
    db.commit()
    return menus


def main():
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        users = seed_users(db)
        menus = seed_menus(db)
        print(f"Seeded {len(users)} users and {len(menus)} menus")

        print("\nDevelopment tokens:")
        for user in users:
            print(f"  {user.role.value:<9} {user.email:<30} {create_access_token(user.id)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
