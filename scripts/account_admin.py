#!/usr/bin/env python3
"""
Account Administration Script

Inspect and unlock the local account from a terminal, against the stores
configured in config/settings.yaml.

Usage:
    python scripts/account_admin.py status --email jane@example.com
    python scripts/account_admin.py unlock --email jane@example.com
    python scripts/account_admin.py show --email jane@example.com
"""

import asyncio
import sys
from pathlib import Path

import click

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.loader import get_config
from src.api.dependencies import build_services
from src.services import gamification_service


def _auth():
    return build_services(get_config()).auth


@click.group()
def cli():
    """StreakGuard account administration"""


@cli.command()
@click.option('--email', required=True, help='Account email')
def status(email):
    """Show failed attempts and lockout state"""
    auth = _auth()
    remaining = asyncio.run(auth.remaining_attempts(email))
    seconds = asyncio.run(auth.seconds_until_unlock(email))
    logged_in = asyncio.run(auth.is_logged_in())

    click.echo(f"🔐 Account: {click.style(email, bold=True, fg='cyan')}")
    click.echo(f"   Remaining attempts: {remaining}")
    if seconds:
        click.echo(click.style(f"   Locked for another {seconds}s", fg='red'))
    elif remaining == 0:
        click.echo(click.style("   Lockout window elapsed; run 'unlock' to clear it", fg='yellow'))
    else:
        click.echo(click.style("   Not locked", fg='green'))
    click.echo(f"   Session open: {'yes' if logged_in else 'no'}")


@cli.command()
@click.option('--email', required=True, help='Account email')
def unlock(email):
    """Clear failed attempts and any lockout"""
    auth = _auth()
    asyncio.run(auth.reset_failed_attempts(email))
    click.echo(f"✅ {click.style('Unlocked', fg='green', bold=True)} {email}")


@cli.command()
@click.option('--email', required=True, help='Account email')
def show(email):
    """Show the engagement progress for an account"""
    auth = _auth()
    user = asyncio.run(auth.get_user_data(email))
    if user is None:
        click.echo(f"❌ No user record for {email}", err=True)
        sys.exit(1)

    summary = gamification_service.build_summary(user)
    milestone = summary['next_milestone']
    click.echo(f"👤 {user.full_name or user.email}")
    click.echo(f"   Points: {summary['formatted_points']} ({summary['rank_title']})")
    click.echo(f"   Streak: {user.login_streak} day(s), bonus x{summary['streak_bonus']}")
    click.echo(f"   Logins: {user.total_logins}")
    click.echo(f"   Badges: {', '.join(user.badges) or '-'}")
    click.echo(f"   Next: {milestone['reward']} in {milestone['remaining']} points")


if __name__ == '__main__':
    cli()
