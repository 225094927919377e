from sqlalchemy.orm import Session

from app.core.identity import IdentityProvider
from app.models.category import Category
from app.models.department import Department
from app.models.user import User
from app.services.accounts import create_account_with_profile

DEFAULT_DEPARTMENTS = ["Finance", "Human Resources", "IT", "Operations"]
DEFAULT_CATEGORIES = ["Electronics", "Furniture", "Office Equipment", "Vehicles"]


def seed_reference_data_if_empty(db: Session) -> bool:
    if db.query(Department).count() > 0 or db.query(Category).count() > 0:
        return False

    db.add_all([Department(name=n) for n in DEFAULT_DEPARTMENTS])
    db.add_all([Category(name=n) for n in DEFAULT_CATEGORIES])
    db.commit()
    return True


def seed_admin_if_empty(db: Session, identity: IdentityProvider, email: str, password: str, name: str = "Administrator"):
    if db.query(User).filter(User.user_type == "admin").count() > 0:
        return None

    return create_account_with_profile(
        db,
        identity,
        name=name,
        email=email,
        password=password,
        user_type="admin",
    )
