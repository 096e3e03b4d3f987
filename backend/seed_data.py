"""Seed database with demo data."""
from asset_tracker.database import Base, SessionLocal, engine
from asset_tracker.models import Asset, MilitaryBase, Personnel, Purchase, User
from asset_tracker.auth import get_password_hash
from asset_tracker.constants import AssetCondition, EquipmentType, Role
import uuid


def seed(db=None):
    """Seed database with demo data. Refuses to run twice."""
    own_session = db is None
    db = db or SessionLocal()

    try:
        if db.query(User.id).first() is not None:
            print("Database already contains users, skipping seed.")
            return

        # Create bases
        alpha = MilitaryBase(id=uuid.UUID('00000000-0000-0000-0000-000000000001'),
                             name="Alpha Base", location="Northern Region")
        bravo = MilitaryBase(id=uuid.UUID('00000000-0000-0000-0000-000000000002'),
                             name="Bravo Base", location="Southern Region")
        charlie = MilitaryBase(id=uuid.UUID('00000000-0000-0000-0000-000000000003'),
                               name="Charlie Base", location="Eastern Region")
        db.add_all([alpha, bravo, charlie])
        db.flush()

        # Create users
        users_data = [
            {'username': 'admin', 'password': 'admin123', 'full_name': 'System Administrator',
             'role': Role.ADMIN, 'base': None},
            {'username': 'commander1', 'password': 'commander123', 'full_name': 'Alpha Base Commander',
             'role': Role.BASE_COMMANDER, 'base': alpha},
            {'username': 'commander2', 'password': 'commander123', 'full_name': 'Bravo Base Commander',
             'role': Role.BASE_COMMANDER, 'base': bravo},
            {'username': 'logistics1', 'password': 'logistics123', 'full_name': 'Alpha Logistics Officer',
             'role': Role.LOGISTICS_OFFICER, 'base': alpha},
            {'username': 'logistics2', 'password': 'logistics123', 'full_name': 'Bravo Logistics Officer',
             'role': Role.LOGISTICS_OFFICER, 'base': bravo},
            {'username': 'john.smith', 'password': 'personnel123', 'full_name': 'John Smith',
             'role': Role.PERSONNEL, 'base': alpha, 'rank': 'Sergeant'},
            {'username': 'jane.doe', 'password': 'personnel123', 'full_name': 'Jane Doe',
             'role': Role.PERSONNEL, 'base': alpha, 'rank': 'Corporal'},
            {'username': 'bob.wilson', 'password': 'personnel123', 'full_name': 'Bob Wilson',
             'role': Role.PERSONNEL, 'base': bravo, 'rank': 'Private'},
        ]

        admin = None
        for user_data in users_data:
            base = user_data['base']
            user = User(
                username=user_data['username'],
                password_hash=get_password_hash(user_data['password']),
                full_name=user_data['full_name'],
                role=user_data['role'].value,
                base_id=base.id if base else None,
                is_active=True,
            )
            db.add(user)
            db.flush()
            if user_data['role'] == Role.ADMIN:
                admin = user
            if user_data['role'] == Role.PERSONNEL:
                db.add(Personnel(name=user_data['full_name'], rank=user_data['rank'],
                                 user_id=user.id, base_id=base.id))

        # Create assets; opening stock is booked as a purchase
        assets_data = [
            ('Humvee', EquipmentType.VEHICLE, 10, AssetCondition.GOOD, alpha),
            ('M16 Rifle', EquipmentType.WEAPON, 50, AssetCondition.GOOD, alpha),
            ('5.56mm Rounds', EquipmentType.AMMUNITION, 10000, AssetCondition.GOOD, alpha),
            ('Tank M1', EquipmentType.VEHICLE, 5, AssetCondition.GOOD, bravo),
            ('AK-47', EquipmentType.WEAPON, 30, AssetCondition.FAIR, bravo),
            ('9mm Rounds', EquipmentType.AMMUNITION, 5000, AssetCondition.GOOD, charlie),
        ]
        for name, equipment_type, quantity, condition, base in assets_data:
            asset = Asset(name=name, equipment_type=equipment_type.value, quantity=quantity,
                          condition=condition.value, base_id=base.id)
            db.add(asset)
            db.flush()
            db.add(Purchase(asset_id=asset.id, base_id=base.id, quantity=quantity, created_by=admin.id))

        db.commit()
        print("Database seeded successfully!")
        print("\nDemo users:")
        for user_data in users_data:
            print(f"  {user_data['username']}/{user_data['password']} ({user_data['role'].value})")

    except Exception:
        db.rollback()
        raise
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    seed()
