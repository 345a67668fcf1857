"""CLI entry point and argument parsing"""

import argparse
from rich.console import Console
import settings
from cli.status_display import show_gateway_status


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat gateway: OpenAI and Anthropic surfaces over one OpenAI-protocol upstream")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")
    parser.add_argument(
        "--manual-approve",
        action="store_true",
        help="Ask on the console before forwarding each completion request"
    )
    parser.add_argument(
        "--rate-limit",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Minimum number of seconds between requests"
    )
    parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the rate limit slot instead of answering 429"
    )
    parser.add_argument(
        "--stream-trace",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable raw stream tracing log capture (implied by --debug unless explicitly disabled)"
    )
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Apply CLI flags on top of the loaded settings (config default -> CLI overrides)"""
    if args.bind:
        settings.BIND_ADDRESS = args.bind
    if args.port:
        settings.PORT = args.port
    if args.manual_approve:
        settings.MANUAL_APPROVE = True
    if args.rate_limit is not None:
        settings.RATE_LIMIT_SECONDS = args.rate_limit
    if args.wait:
        settings.RATE_LIMIT_WAIT = True

    if args.stream_trace is None:
        if args.debug:
            settings.STREAM_TRACE_ENABLED = True
    else:
        settings.STREAM_TRACE_ENABLED = args.stream_trace


def main(argv=None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    if args.wait and not settings.RATE_LIMIT_SECONDS:
        console.print("[yellow]--wait has no effect without --rate-limit[/yellow]")

    try:
        # Imported late so the server picks up the overridden settings
        from proxy import ProxyServer

        show_gateway_status(console, settings.BIND_ADDRESS, settings.PORT)
        server = ProxyServer(debug=args.debug, bind_address=settings.BIND_ADDRESS, port=settings.PORT)
        server.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
