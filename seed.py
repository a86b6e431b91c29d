# seed.py
import os
from datetime import datetime, timedelta

from app import app
from models import db, Owner, GymSession

with app.app_context():
    db.create_all()
    email = os.getenv('SEED_OWNER_EMAIL', 'bobby@example.com').strip().lower()
    owner = Owner.query.filter_by(email=email).first()
    if not owner:
        owner = Owner(email=email)
        owner.set_password(os.getenv('SEED_OWNER_PASSWORD', 'bobby'))
        db.session.add(owner)
        db.session.flush()

    now = datetime.now().replace(second=0, microsecond=0)
    demo = [
      (now - timedelta(minutes=30), timedelta(hours=1)),
      (now + timedelta(hours=3), timedelta(hours=1, minutes=30)),
      (now + timedelta(days=1), timedelta(hours=2)),
      (now - timedelta(days=2), timedelta(hours=1)),
    ]
    for start, length in demo:
        db.session.add(GymSession(user_id=owner.id, start_time=start, end_time=start + length))
    db.session.commit()
    print("Seed OK")
