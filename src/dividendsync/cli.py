"""Command-line interface for cron-style runs and ad-hoc lookups."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click
from dotenv import load_dotenv

from dividendsync import config_from_env, create_orchestrator_from_env
from dividendsync.errors import DividendSyncError
from dividendsync.factory import build_providers, build_resolver
from dividendsync.trigger import handle_trigger


def _echo_json(body) -> None:
    click.echo(json.dumps(body, indent=2, default=str))


def _trigger(payload: dict) -> None:
    try:
        orchestrator = create_orchestrator_from_env()
    except DividendSyncError as exc:
        raise click.ClickException(exc.message) from exc
    response = asyncio.run(handle_trigger(payload, orchestrator))
    _echo_json(response.body)
    if response.status >= 400:
        sys.exit(1)


@click.group()
@click.option("--log-level", default="INFO", show_default=True, help="Python logging level")
@click.option("--env-file", default=None, help="Path to a .env file to load")
def cli(log_level, env_file):
    """dividendsync - portfolio dividend detection"""
    load_dotenv(env_file)
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--user", "user_id", required=True, help="Owning user id")
@click.option("--portfolio", "portfolio_id", required=True, help="Portfolio id")
def run(user_id, portfolio_id):
    """Detect dividends for one portfolio"""
    _trigger({"userId": user_id, "portfolioId": portfolio_id})


@cli.command("run-all")
def run_all():
    """Run every due detection job"""
    _trigger({"runAll": True})


@cli.command()
@click.argument("symbols", nargs=-1, required=True)
def resolve(symbols):
    """Look up dividend facts for SYMBOLS"""
    resolver = build_resolver(config_from_env())

    async def lookup():
        return [(s, await resolver.resolve(s)) for s in symbols]

    click.echo(f"{'SYMBOL':<10}{'ANNUAL':>10}{'YIELD %':>10}  {'FREQUENCY':<12}SOURCE")
    for raw, fact in asyncio.run(lookup()):
        click.echo(
            f"{raw.upper():<10}{fact.annual:>10.4f}{fact.dividend_yield:>10.2f}  "
            f"{fact.frequency.value:<12}{resolver.last_origin(raw)}"
        )
    click.echo(f"\n{resolver.stats.to_dict()}")


@cli.command()
def providers():
    """Show the configured provider chain"""
    chain = build_providers(config_from_env())
    if not chain:
        click.echo("No providers configured")
        return
    for i, provider in enumerate(chain, start=1):
        click.echo(f"{i}. {provider.name}")


if __name__ == "__main__":
    cli()
