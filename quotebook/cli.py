"""Management commands (``flask create-user``, ``flask mark-overdue``, ``flask seed-tax-rates``)."""
import click

from quotebook import db
from quotebook.models import TaxRate, User
from quotebook.services.payment_service import PaymentService

DEFAULT_TAX_RATES = [
    # region, cgst, sgst, igst
    ('Intra-state (18%)', '9', '9', '0'),
    ('Inter-state (18%)', '0', '0', '18'),
    ('Intra-state (12%)', '6', '6', '0'),
    ('Inter-state (12%)', '0', '0', '12'),
]


def create_user(email, name, password, role='user'):
    email = email.strip().lower()
    if role not in User.ROLES:
        raise click.BadParameter(f"role must be one of {', '.join(User.ROLES)}", param_hint='--role')
    if User.query.filter_by(email=email).first() is not None:
        raise click.ClickException(f'User {email} already exists.')
    user = User(email=email, name=name, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def seed_tax_rates():
    created = 0
    for region, cgst, sgst, igst in DEFAULT_TAX_RATES:
        if TaxRate.query.filter_by(region=region).first() is None:
            db.session.add(TaxRate(region=region, cgst_rate=cgst, sgst_rate=sgst, igst_rate=igst))
            created += 1
    db.session.commit()
    return created


def register_cli(app):
    @app.cli.command('create-user')
    @click.option('--email', prompt=True)
    @click.option('--name', prompt=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option('--role', default='admin', show_default=True)
    def create_user_cmd(email, name, password, role):
        user = create_user(email, name, password, role)
        click.echo(f'Created {user.role} {user.email}')

    @app.cli.command('mark-overdue')
    @click.option('--date', 'on_date', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
                  help='Evaluate as of this date (default: today).')
    def mark_overdue_cmd(on_date):
        count = PaymentService.mark_overdue(on_date.date() if on_date else None)
        click.echo(f'{count} invoice(s) marked overdue')

    @app.cli.command('seed-tax-rates')
    def seed_tax_rates_cmd():
        click.echo(f'{seed_tax_rates()} tax rate(s) added')
