"""
Flask CLI commands.

Commands:
- flask init-db: Create database tables
- flask create-user: Create a distributor or retailer account with its profile
"""

import click
import re
from orderhub.database import get_session, create_all, drop_all
from orderhub.models import AppUser, UserRole, Distributor, Retailer

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first')
    def init_db_command(drop):
        """Create all tables."""
        if drop:
            drop_all()
            click.echo(click.style('Dropped existing tables.', fg='yellow'))
        create_all()
        click.echo(click.style('Database initialized.', fg='green'))

    @app.cli.command('create-user')
    @click.option('--email', prompt=True, help='Account email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Account password')
    @click.option('--role', type=click.Choice([UserRole.DISTRIBUTOR.value, UserRole.RETAILER.value]),
                  default=UserRole.DISTRIBUTOR.value, show_default=True)
    @click.option('--business-name', prompt=True, help='Business display name')
    @click.option('--address', default='', help='Business or store address')
    def create_user(email, password, role, business_name, address):
        """Create a user together with its distributor/retailer profile."""
        db_session = get_session()

        if not re.match(EMAIL_PATTERN, email):
            click.echo(click.style('Invalid email. Use the format user@example.com', fg='red'))
            return

        if len(password) < 6:
            click.echo(click.style('The password must be at least 6 characters long.', fg='red'))
            return

        if db_session.query(AppUser).filter_by(email=email.lower()).first():
            click.echo(click.style(f'A user with email {email} already exists.', fg='red'))
            return

        try:
            user = AppUser(email=email.lower(), business_name=business_name, role=role)
            user.set_password(password)
            db_session.add(user)
            db_session.flush()

            if role == UserRole.DISTRIBUTOR.value:
                profile = Distributor(user_id=user.id, business_address=address or None)
            else:
                profile = Retailer(user_id=user.id, store_address=address or None)
            db_session.add(profile)
            db_session.commit()

            click.echo(click.style(f'\n{role.capitalize()} created successfully!', fg='green', bold=True))
            click.echo(f'   Email: {user.email}')
            click.echo(f'   User ID: {user.id}')
            click.echo(f'   Profile ID: {profile.id}')

        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'Error creating user: {str(e)}', fg='red'))
