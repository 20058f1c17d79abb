import logging
from datetime import timedelta

import click
from tabulate import tabulate

from poolconfig.communities import format_community
from poolconfig.config import Config, load_config
from poolconfig.errors import ConfigError
from poolconfig.utils import setup_logging


def load_or_exit(path: str) -> Config:
    try:
        return load_config(path)
    except (ConfigError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


def format_hold_time(hold_time: timedelta) -> str:
    return f"{hold_time.total_seconds():g}s"


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def cli(log_level):
    """Address pool configuration CLI"""
    setup_logging("poolconfig", getattr(logging, log_level.upper()))


@cli.command()
@click.argument("config_path", type=click.Path(dir_okay=False))
def check(config_path):
    """Validate a configuration file"""
    config = load_or_exit(config_path)
    click.echo(f"OK: {len(config.peers)} peers, {len(config.pools)} pools")


@cli.group()
def show():
    """Show parsed configuration"""
    pass


@show.command()
@click.argument("config_path", type=click.Path(dir_okay=False))
def peers(config_path):
    """Show BGP peers"""
    config = load_or_exit(config_path)
    headers = ["Peer Address", "Port", "My ASN", "Peer ASN", "Hold Time"]
    table = [
        [
            str(p.addr),
            p.port,
            p.my_asn,
            p.asn,
            format_hold_time(p.hold_time),
        ]
        for p in config.peers
    ]
    print(tabulate(table, headers=headers, tablefmt="grid"))


@show.command()
@click.argument("config_path", type=click.Path(dir_okay=False))
def pools(config_path):
    """Show address pools"""
    config = load_or_exit(config_path)
    headers = ["Pool", "CIDRs", "Avoid Buggy IPs", "Advertisements"]
    table = [
        [
            pool.name,
            "\n".join(str(c) for c in pool.cidrs),
            pool.avoid_buggy_ips,
            len(pool.advertisements),
        ]
        for pool in config.pools.values()
    ]
    print(tabulate(table, headers=headers, tablefmt="grid"))


@show.command()
@click.argument("config_path", type=click.Path(dir_okay=False))
def advertisements(config_path):
    """Show advertisement policy per pool"""
    config = load_or_exit(config_path)
    headers = ["Pool", "Index", "Aggregation Length", "Local Pref", "Communities"]
    table = [
        [
            pool.name,
            i,
            ad.aggregation_length,
            ad.local_pref,
            " ".join(format_community(c) for c in sorted(ad.communities)),
        ]
        for pool in config.pools.values()
        for i, ad in enumerate(pool.advertisements)
    ]
    print(tabulate(table, headers=headers, tablefmt="grid"))


if __name__ == "__main__":
    cli()
