"""Status display functionality for CLI"""

from rich.table import Table

import settings


def show_gateway_status(console, bind_address: str, port: int):
    """
    Display the effective gateway configuration

    Args:
        console: Rich console for output
        bind_address: The bind address for the server
        port: The port for the server
    """
    table = Table(title="Chat Gateway")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    base = f"http://{bind_address}:{port}"
    table.add_row("OpenAI surface", f"{base}/v1/chat/completions")
    table.add_row("Anthropic surface", f"{base}/v1/messages")
    table.add_row("Upstream", settings.UPSTREAM_BASE_URL)
    table.add_row("Upstream API key", "set" if settings.UPSTREAM_API_KEY else "[yellow]not set[/yellow]")
    table.add_row("Rate limit", describe_rate_limit())
    table.add_row("Manual approval", "on" if settings.MANUAL_APPROVE else "off")
    table.add_row("Stream tracing", settings.STREAM_TRACE_DIR if settings.STREAM_TRACE_ENABLED else "off")

    console.print(table)


def describe_rate_limit() -> str:
    """One-line summary of the admission control settings"""
    if not settings.RATE_LIMIT_SECONDS:
        return "off"
    mode = "wait" if settings.RATE_LIMIT_WAIT else "reject with 429"
    return f"{settings.RATE_LIMIT_SECONDS}s between requests ({mode})"
