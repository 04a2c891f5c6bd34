# create_tables.py
import os

from app.database import Base, SessionLocal, engine
from app.models import User, UserRole
from app.utils.security import get_password_hash

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

def create_tables():
    """Create all tables"""
    try:
        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")

        # Create default admin user
        create_default_admin()

    except Exception as e:
        print(f"❌ Error creating tables: {e}")

def create_default_admin():
    """Create a default admin user"""
    db = SessionLocal()
    try:
        # Check if admin user already exists
        if db.query(User).filter(User.email == ADMIN_EMAIL).first():
            print(f"ℹ️ Admin user {ADMIN_EMAIL} already exists")
            return

        db.add(User(
            name="Administrator",
            email=ADMIN_EMAIL,
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
            department="Management",
        ))
        db.commit()
        print(f"✅ Default admin user created: {ADMIN_EMAIL}")

    except Exception as e:
        db.rollback()
        print(f"❌ Error creating admin user: {e}")
    finally:
        db.close()

if __name__ == "__main__":
    create_tables()
