import os

import click
from flask.cli import with_appcontext

from domaincms.extensions import db
from domaincms.models.user import User


@click.command("seed-admin")
@click.option("--email", default=lambda: os.getenv("ADMIN_EMAIL", "admin@example.com"), help="Admin email")
@click.option("--password", default=lambda: os.getenv("ADMIN_PASSWORD"), help="Admin password")
@click.option("--name", default=lambda: os.getenv("ADMIN_NAME", "Administrator"), help="Display name")
@with_appcontext
def seed_admin(email, password, name):
    """
    Create the first admin account, or promote and reactivate an
    existing user with the same email.
    """
    if not password or len(password) < 8:
        raise click.BadParameter("Password must be at least 8 characters", param_hint="--password")

    email = email.strip().lower()
    user = User.query.filter_by(email=email).first()

    if user is None:
        user = User()
        user.email = email
        user.name = name
        user.set_password(password)
        db.session.add(user)
        message = f"Admin created: {email}"
    else:
        message = f"Existing user promoted to admin: {email}"

    user.is_admin = True
    user.is_active = True
    db.session.commit()

    click.echo(click.style(message, fg="green"))
