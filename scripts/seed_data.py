#!/usr/bin/env python
"""Seed the development database with a demo user and a few albums."""
import traceback

from sqlalchemy.orm import Session

from src.core.security import hash_password
from src.db.base import SessionLocal
from src.models import Album, User

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "password123"


def seed_users(db: Session) -> User:
    """Create the demo user."""
    user = db.query(User).filter(User.email == DEMO_EMAIL).first()
    if user:
        print(f"  → User exists: {user.email}")
        return user

    user = User(name="Demo User", email=DEMO_EMAIL, password_hash=hash_password(DEMO_PASSWORD))
    db.add(user)
    db.commit()
    print(f"  → Created user: {user.email}")
    return user


def seed_albums(db: Session, owner: User):
    """Create demo albums."""
    albums = [
        Album(user_id=owner.id, title="Summer Holidays", description="Beach and mountains"),
        Album(user_id=owner.id, title="Birthday Party 2024", description="Kids birthday celebration"),
    ]

    for album in albums:
        existing = db.query(Album).filter(Album.user_id == owner.id, Album.title == album.title).first()
        if not existing:
            db.add(album)
            print(f"  → Created album: {album.title}")

    db.commit()
    print("✅ Created demo albums")


if __name__ == "__main__":
    print("🌱 Seeding database...")
    print("=" * 50)

    db = SessionLocal()
    try:
        owner = seed_users(db)
        seed_albums(db, owner)
        print("=" * 50)
        print("✅ Database seeded successfully!")
        print(f"\n📝 Demo credentials: {DEMO_EMAIL} / {DEMO_PASSWORD}")
    except Exception as e:
        print(f"❌ Error seeding database: {e}")
        traceback.print_exc()
    finally:
        db.close()
