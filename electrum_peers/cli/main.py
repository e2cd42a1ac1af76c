"""
electrum-peers CLI - Command line front end for the Electrum client.

Main entry point for all CLI commands.
"""

import json
import logging

import click

from electrum_peers.core.config import load_config
from electrum_peers.utils.logger import setup_logging, get_logger


def _build_node(host: str, tcp_port: int, ssl_port: int):
    from electrum_peers.network import NodeDescriptor

    try:
        return NodeDescriptor.from_ports(host, tcp_port=tcp_port, ssl_port=ssl_port)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="HOST/--tcp-port/--ssl-port")


def _build_client(ctx):
    from electrum_peers.network import ElectrumClient

    config = ctx.obj["config"]
    return ElectrumClient(
        logger=get_logger("cli"),
        max_response_size=config.max_response_size,
        default_ports={"t": config.default_tcp_port, "s": config.default_ssl_port},
    )


def _node_options(f):
    f = click.option("--ssl-port", default=0, type=int, help="TLS port (0 = plain TCP only)")(f)
    f = click.option("--tcp-port", default=None, type=int, help="Plain TCP port")(f)
    f = click.option("--timeout", default=None, type=click.FloatRange(min=0, min_open=True), help="Seconds per call")(f)
    return f


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help=".env file to load")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file):
    """Electrum peer discovery client"""
    try:
        config = load_config(env_file)
    except ValueError as e:
        raise click.UsageError(str(e))

    level = logging.DEBUG if debug else config.log_level
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Connection Commands
# =============================================================================


@cli.command("connect")
@click.argument("host")
@_node_options
@click.pass_context
def connect(ctx, host, timeout, tcp_port, ssl_port):
    """Open (and close) a connection to HOST using the best transport"""
    from electrum_peers.network import ElectrumError

    config = ctx.obj["config"]
    node = _build_node(host, config.default_tcp_port if tcp_port is None else tcp_port, ssl_port)
    client = _build_client(ctx)

    try:
        conn = client.connect(node, config.timeout if timeout is None else timeout)
    except ElectrumError as e:
        raise click.ClickException(str(e))

    transport = "TLS" if node.supports_tls else "TCP"
    port = node.ssl_port if node.supports_tls else node.tcp_port
    conn.close()
    click.echo(f"✓ Connected to {node.host}:{port} over {transport}")


# =============================================================================
# Discovery Commands
# =============================================================================


@cli.command("peers")
@click.argument("host")
@_node_options
@click.option("--id", "request_id", default=0, type=int, help="JSON-RPC request id")
@click.option("--json", "as_json", is_flag=True, help="Print peers as JSON")
@click.pass_context
def peers(ctx, host, timeout, tcp_port, ssl_port, request_id, as_json):
    """List the peers HOST knows about (server.peers.subscribe)"""
    from electrum_peers.network import ElectrumError

    config = ctx.obj["config"]
    node = _build_node(host, config.default_tcp_port if tcp_port is None else tcp_port, ssl_port)
    client = _build_client(ctx)

    try:
        found = client.get_peer_info(node, request_id, config.timeout if timeout is None else timeout)
    except ElectrumError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps([
            {
                "host": p.host,
                "tcp_port": p.tcp_port,
                "ssl_port": p.ssl_port,
                "supports_tls": p.supports_tls,
                "onion": p.is_onion,
            }
            for p in found
        ], indent=2))
        return

    click.echo(f"Peers of {node.host}: {len(found)}")
    click.echo("-" * 40)
    for p in found:
        flags = []
        if p.tcp_port:
            flags.append(f"t{p.tcp_port}")
        if p.ssl_port:
            flags.append(f"s{p.ssl_port}")
        if p.is_onion:
            flags.append("onion")
        click.echo(f"  {p.host}  {' '.join(flags)}")


if __name__ == "__main__":
    cli()
