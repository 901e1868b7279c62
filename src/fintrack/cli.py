"""Flask CLI commands for FinTrack."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import click

from .models.finance import Category, FinanceRecord, RecordType

# (title, amount, type, category) repeated for every month of the seeded year.
_DEMO_MONTH: tuple[tuple[str, str, RecordType, Category], ...] = (
    ("Salary payment", "4200.00", RecordType.INCOME, Category.SALARY),
    ("Groceries", "310.45", RecordType.EXPENSE, Category.FOOD),
    ("Bus pass", "55.00", RecordType.EXPENSE, Category.TRANSPORTATION),
    ("Electricity bill", "89.50", RecordType.EXPENSE, Category.UTILITIES),
    ("Cinema", "24.00", RecordType.EXPENSE, Category.ENTERTAINMENT),
)


def demo_records(user_id: int, year: int) -> list[FinanceRecord]:
    """Build one year of representative records for ``user_id``."""

    records: list[FinanceRecord] = []
    for month in range(1, 13):
        for offset, (title, amount, record_type, category) in enumerate(_DEMO_MONTH):
            records.append(
                FinanceRecord(
                    user_id=user_id,
                    title=title,
                    amount=Decimal(amount),
                    type=record_type.value,
                    category=category.value,
                    created_at=datetime(year, month, 1) + timedelta(days=offset * 5, hours=9),
                )
            )
    return records


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("fintrack-create-user")
    @click.argument("username")
    @click.password_option()
    def create_user_command(username: str, password: str) -> None:
        """Create a user and print a bearer token for it."""

        from .extensions import get_session_factory
        from .services import auth

        config = app.config["FINTRACK_CONFIG"]
        try:
            user = auth.create_user(
                username=username, password=password, session_factory=get_session_factory()
            )
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        token = auth.issue_token(
            user.id,
            config.SECRET_KEY,
            expires_in=timedelta(minutes=config.TOKEN_TTL_MINUTES),
            algorithm=config.TOKEN_ALGORITHM,
        )
        click.echo(f"Created user {user.username} (id={user.id})")
        click.echo(token)

    @app.cli.command("fintrack-seed")
    @click.option("--username", required=True, help="Owner of the demo records")
    @click.option("--year", type=int, default=None, help="Year to seed (defaults to current)")
    def seed_command(username: str, year: int | None) -> None:
        """Insert a year of demo records for an existing user."""

        from .extensions import get_session_factory, session_scope
        from .services import auth

        user = auth.get_user_by_username(username, get_session_factory())
        if user is None:
            raise click.ClickException(f"Unknown user: {username}")
        year = year or datetime.now().year
        records = demo_records(user.id, year)
        with session_scope() as session:
            session.add_all(records)
        click.echo(f"Seeded {len(records)} records for {username} in {year}")
