"""Data access for gym sessions and the danger flag.

Every call is its own query. Store errors never escape: reads fall back to
an empty/false/None default and writes report False; in both cases the
error is logged through the Flask app logger.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

import availability
from models import db, GymSession, Setting, DANGER_KEY


def _failed(message):
    current_app.logger.exception(message)
    db.session.rollback()


# ——— Reads ———
def is_owner_at_gym(now=None):
    now = now or datetime.now()
    try:
        candidates = (
            GymSession.query
            .filter(GymSession.start_time <= now, GymSession.end_time >= now)
            .all()
        )
    except SQLAlchemyError:
        _failed('Error checking if owner is at gym')
        return False
    return availability.is_present(now, candidates)


def get_current_session(now=None):
    now = now or datetime.now()
    try:
        return (
            GymSession.query
            .filter(GymSession.start_time <= now, GymSession.end_time >= now)
            .order_by(GymSession.start_time.desc())
            .first()
        )
    except SQLAlchemyError:
        _failed('Error fetching current session')
        return None


def get_all_sessions(owner_id=None):
    try:
        q = GymSession.query
        if owner_id is not None:
            q = q.filter_by(user_id=owner_id)
        return q.order_by(GymSession.start_time.desc()).all()
    except SQLAlchemyError:
        _failed('Error fetching gym sessions')
        return []


def get_future_sessions(now=None):
    now = now or datetime.now()
    try:
        return (
            GymSession.query
            .filter(
                GymSession.start_time > now,
                GymSession.start_time <= availability.end_of_day(now),
            )
            .order_by(GymSession.start_time.asc())
            .all()
        )
    except SQLAlchemyError:
        _failed('Error fetching future sessions')
        return []


def get_danger_flag():
    try:
        setting = db.session.get(Setting, DANGER_KEY)
    except SQLAlchemyError:
        _failed('Error fetching danger status')
        return False
    return setting is not None and setting.value == 'true'


def load_status(now=None):
    """Everything the public status page shows, one query per fact."""
    now = now or datetime.now()
    present = is_owner_at_gym(now)
    current = get_current_session(now) if present else None
    return {
        'now': now,
        'present': present,
        'current': current,
        'remaining_minutes': availability.remaining_minutes(now, current),
        'future': get_future_sessions(now),
        'danger': get_danger_flag(),
    }


# ——— Writes ———
def add_session(start, end, owner_id):
    if availability.validate_window(start, end):
        return False
    try:
        db.session.add(GymSession(user_id=owner_id, start_time=start, end_time=end))
        db.session.commit()
    except SQLAlchemyError:
        _failed('Error adding gym session')
        return False
    return True


def delete_session(session_id):
    try:
        GymSession.query.filter_by(id=session_id).delete()
        db.session.commit()
    except SQLAlchemyError:
        _failed('Error deleting gym session')
        return False
    return True


def set_danger_flag(value):
    try:
        db.session.merge(Setting(key=DANGER_KEY, value='true' if value else 'false'))
        db.session.commit()
    except SQLAlchemyError:
        _failed('Error updating danger status')
        return False
    return True
