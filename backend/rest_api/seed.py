"""
Seed data for development and testing.
Creates minimal initial data: admin user, categories, products, areas and
the About Us document. Every step is idempotent.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Area, Category, Product, User
from rest_api.services.domain import AboutService
from shared.config.constants import DEFAULT_CATEGORIES, AdminAccess, Roles
from shared.config.logging import get_logger, mask_email
from shared.config.settings import settings
from shared.security.password import hash_password
from shared.utils.validators import slugify

logger = get_logger(__name__)


SEED_PRODUCTS = [
    {
        "name": "Nachos Bocatto",
        "description": "Totopos con queso fundido, guacamole, pico de gallo y crema",
        "price": 7.50,
        "category": "Entradas y Snacks",
        "ingredients": ["totopos", "queso cheddar", "aguacate", "tomate", "cebolla", "crema"],
        "current_stock": 40,
    },
    {
        "name": "Hamburguesa Clásica",
        "description": "Carne de res 180 g, queso, lechuga, tomate y salsa de la casa en pan brioche",
        "price": 9.90,
        "category": "Hamburguesas",
        "ingredients": ["pan brioche", "carne de res", "queso cheddar", "lechuga", "tomate", "salsa de la casa"],
        "current_stock": 50,
    },
    {
        "name": "Pizza Margarita",
        "description": "Salsa de tomate, mozzarella fresca y albahaca",
        "price": 11.00,
        "category": "Pizzas",
        "ingredients": ["masa de trigo", "salsa de tomate", "mozzarella", "albahaca", "aceite de oliva"],
        "current_stock": 30,
    },
    {
        "name": "Fettuccine Alfredo",
        "description": "Pasta fresca en salsa cremosa de parmesano",
        "price": 10.50,
        "category": "Pastas",
        "ingredients": ["fettuccine", "crema de leche", "mantequilla", "queso parmesano", "ajo"],
        "current_stock": 25,
    },
    {
        "name": "Ensalada César",
        "description": "Lechuga romana, crutones, parmesano y aderezo césar",
        "price": 8.00,
        "category": "Ensaladas",
        "ingredients": ["lechuga romana", "crutones", "queso parmesano", "pollo", "aderezo césar"],
        "current_stock": 25,
    },
    {
        "name": "Cheesecake de Maracuyá",
        "description": "Base de galleta con crema de queso y coulis de maracuyá",
        "price": 5.50,
        "category": "Postres",
        "ingredients": ["galleta", "queso crema", "huevo", "azúcar", "maracuyá"],
        "current_stock": 20,
    },
    {
        "name": "Limonada de Hierbabuena",
        "description": "Limonada natural con hierbabuena fresca",
        "price": 2.75,
        "category": "Bebidas",
        "ingredients": ["limón", "hierbabuena", "azúcar", "agua"],
        "current_stock": 60,
    },
]

SEED_AREAS = [
    {
        "name": "Terraza",
        "description": "Espacio al aire libre con vista a la ciudad, ideal para reuniones",
        "min_capacity": 2,
        "max_capacity": 12,
        "features": ["Vista panorámica", "Calefactores", "Zona fumadores"],
    },
    {
        "name": "Salón Privado",
        "description": "Salón cerrado para celebraciones y reuniones de trabajo",
        "min_capacity": 6,
        "max_capacity": 30,
        "features": ["Proyector", "Sonido", "Aire acondicionado", "Decoración"],
    },
    {
        "name": "Barra",
        "description": "Zona de barra junto a la cocina abierta",
        "min_capacity": 1,
        "max_capacity": 6,
        "features": ["Cocina a la vista", "Coctelería"],
    },
]


def seed_admin(db: Session) -> User:
    """Create the administrator account from SEED_ADMIN_* settings."""
    email = settings.seed_admin_email.lower()
    admin = db.scalar(select(User).where(User.email == email))
    if admin:
        logger.info("Admin already seeded, skipping", email=mask_email(email))
        return admin

    admin = User(
        first_name="Admin",
        last_name="Bocatto",
        email=email,
        password_hash=hash_password(settings.seed_admin_password),
        role=Roles.ADMIN,
        admin_access=AdminAccess.SUPER_ADMIN,
    )
    db.add(admin)
    db.flush()
    logger.info("Admin user created", user_id=admin.id, email=mask_email(email))
    return admin


def seed_categories(db: Session, admin: User) -> None:
    if db.scalar(select(Category.id).limit(1)):
        logger.info("Categories already seeded, skipping")
        return

    for data in DEFAULT_CATEGORIES:
        category = Category(**data, slug=slugify(str(data["name"])))
        category.set_created_by(admin.id)
        db.add(category)
    logger.info("Categories seeded", count=len(DEFAULT_CATEGORIES))


def seed_products(db: Session, admin: User) -> None:
    if db.scalar(select(Product.id).limit(1)):
        logger.info("Products already seeded, skipping")
        return

    for data in SEED_PRODUCTS:
        product = Product(**data, available=True)
        product.set_created_by(admin.id)
        db.add(product)
    logger.info("Products seeded", count=len(SEED_PRODUCTS))


def seed_areas(db: Session, admin: User) -> None:
    if db.scalar(select(Area.id).limit(1)):
        logger.info("Areas already seeded, skipping")
        return

    for data in SEED_AREAS:
        area = Area(**data)
        area.set_created_by(admin.id)
        db.add(area)
    logger.info("Areas seeded", count=len(SEED_AREAS))


def seed(db: Session) -> None:
    """
    Seed initial data.
    Idempotent: each step only inserts when its table is empty.
    """
    admin = seed_admin(db)
    seed_categories(db, admin)
    seed_products(db, admin)
    seed_areas(db, admin)
    db.commit()

    # Creates the default document when none exists
    AboutService(db).get_document()
    logger.info("Seed completed")
