"""Create the schema and load the demo madrasha into the configured database.

Run from the repository root: python -m backend.seed_demo_data
"""
from backend.madrasha_module.database import Base, SessionLocal, engine
from backend.madrasha_module.services.seed import DEMO_CREDENTIALS, seed_demo_data


def main() -> None:
    print(f"--- Seeding demo data into {engine.url.render_as_string(hide_password=True)} ---")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        created = seed_demo_data(db)
    finally:
        db.close()

    if not created:
        print("Demo data already present. Nothing to do.")
        return

    print("\nDone! Demo logins:")
    for label, email, password in DEMO_CREDENTIALS:
        print(f"  {label:<10} {email} / {password}")


if __name__ == "__main__":
    main()
