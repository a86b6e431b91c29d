from datetime import datetime
from functools import wraps
import logging
import os

import click
from flask import Flask, render_template, request, redirect, url_for, session as flask_session, flash, jsonify
from flask_migrate import Migrate
from dotenv import load_dotenv

import availability
import store
from models import db, Owner
from poller import RepeatingTask


load_dotenv()
logging.basicConfig(level=logging.INFO)

app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-change-me')
app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///gym.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['POLL_INTERVAL_SECONDS'] = int(os.getenv('POLL_INTERVAL_SECONDS', '60'))

INPUT_FORMAT = '%Y-%m-%dT%H:%M'  # <input type="datetime-local">

db.init_app(app)
migrate = Migrate(app, db)


# ——— Template filters ———
@app.template_filter('clock')
def clock(dt):
    # h:mm AM
    return dt.strftime('%I:%M %p').lstrip('0')


@app.template_filter('longdate')
def longdate(dt):
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


# ——— Helpers & Decorators ———
def current_owner_id():
    return flask_session.get('owner_id')


def owner_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_owner_id():
            return redirect(url_for('login'))
        return f(*args, **kwargs)
    return wrapper


def parse_local(value):
    value = (value or '').strip()
    if not value:
        return None
    return datetime.strptime(value, INPUT_FORMAT)


def status_payload(status):
    current = status['current']
    return {
        'now': status['now'].isoformat(),
        'present': status['present'],
        'current': current.to_dict() if current else None,
        'remaining_minutes': status['remaining_minutes'],
        'future': [s.to_dict() for s in status['future']],
        'danger': status['danger'],
    }


# ——— Routes: Public ———
@app.route('/')
def home():
    status = store.load_status()
    return render_template('index.html',
                           poll_seconds=app.config['POLL_INTERVAL_SECONDS'],
                           **status)


@app.route('/api/status')
def api_status():
    return jsonify(status_payload(store.load_status()))


# ——— Routes: Auth ———
@app.route('/bobby/login', methods=['GET', 'POST'])
def login():
    if current_owner_id():
        return redirect(url_for('manage'))
    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')
        if not email or not password:
            flash('Please enter both email and password', 'error')
            return redirect(url_for('login'))

        owner = Owner.query.filter_by(email=email.lower()).first()
        if not owner or not owner.check_password(password):
            app.logger.info('Failed sign-in for %s', email)
            flash('Invalid email or password.', 'error')
            return redirect(url_for('login'))

        flask_session['owner_id'] = owner.id
        flask_session['owner_email'] = owner.email
        flash('Signed in.', 'success')
        return redirect(url_for('manage'))
    return render_template('login.html')


@app.route('/bobby/logout')
def logout():
    flask_session.clear()
    flash('Signed out.', 'info')
    return redirect(url_for('login'))


# ——— Routes: Owner ———
@app.route('/bobby')
@owner_required
def manage():
    now = datetime.now()
    present = store.is_owner_at_gym(now)
    current = store.get_current_session(now) if present else None
    sessions = store.get_all_sessions()
    return render_template('manage.html',
                           now=now,
                           present=present,
                           current=current,
                           remaining_minutes=availability.remaining_minutes(now, current),
                           sessions=sessions,
                           danger=store.get_danger_flag(),
                           is_today=availability.is_today,
                           is_active=availability.is_active,
                           poll_seconds=app.config['POLL_INTERVAL_SECONDS'])


@app.route('/bobby/sessions', methods=['POST'])
def add_session():
    try:
        start = parse_local(request.form.get('start_time'))
        end = parse_local(request.form.get('end_time'))
    except ValueError:
        flash('Please enter valid start and end times', 'error')
        return redirect(url_for('manage'))

    error = availability.validate_window(start, end)
    if error:
        flash(error, 'error')
        return redirect(url_for('manage'))

    owner_id = current_owner_id()
    if not owner_id:
        flash('You must be logged in to add sessions', 'error')
        return redirect(url_for('login'))

    if store.add_session(start, end, owner_id):
        flash('Session added.', 'success')
    else:
        flash('Session could not be added.', 'error')
    return redirect(url_for('manage'))


@app.route('/bobby/sessions/<session_id>/delete', methods=['POST'])
@owner_required
def delete_session(session_id):
    if store.delete_session(session_id):
        flash('Session deleted.', 'success')
    else:
        flash('Session could not be deleted.', 'error')
    return redirect(url_for('manage'))


@app.route('/bobby/danger', methods=['POST'])
@owner_required
def set_danger():
    value = request.form.get('danger') == 'true'
    if store.set_danger_flag(value):
        flash('Danger alert turned on.' if value else 'Danger alert cleared.', 'success')
    else:
        flash('Danger status could not be updated.', 'error')
    return redirect(url_for('manage'))


# ——— CLI ———
@app.cli.command('init-db')
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo('Database ready')


@app.cli.command('create-owner')
@click.argument('email')
@click.password_option()
def create_owner(email, password):
    """Register the owner account that may manage sessions."""
    if Owner.query.filter_by(email=email.strip().lower()).first():
        raise click.ClickException(f'{email} is already registered')
    owner = Owner(email=email)
    owner.set_password(password)
    db.session.add(owner)
    db.session.commit()
    click.echo(f'Owner {owner.email} created ({owner.id})')


def describe_status(status):
    if status['present']:
        line = f"At the gym, session ends in {status['remaining_minutes']} minutes"
    else:
        line = 'Not at the gym'
    if status['future']:
        line += ', next today at ' + clock(status['future'][0].start_time)
    if status['danger']:
        line += ' [DANGER]'
    return line


@app.cli.command('watch')
@click.option('--interval', type=int, default=None, help='Seconds between polls.')
@click.option('--once', is_flag=True, help='Print the status once and exit.')
def watch(interval, once):
    """Print the gym status on every poll until interrupted."""
    def poll():
        with app.app_context():
            click.echo(f"{datetime.now():%H:%M} {describe_status(store.load_status())}")

    if once:
        poll()
        return

    task = RepeatingTask(interval or app.config['POLL_INTERVAL_SECONDS'], poll, name='status-watch')
    task.start()
    try:
        while task.running:
            task.join(1)
    except KeyboardInterrupt:
        pass
    finally:
        task.cancel()


if __name__ == '__main__':
    app.run(debug=True)
