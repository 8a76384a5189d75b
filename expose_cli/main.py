"""Main entry point for expose CLI"""

import argparse
import os
import sys
import traceback
from pathlib import Path

from . import __version__
from .config import ExposeConfig, environment_overrides, load_config, save_config
from .dashboard import DEFAULT_DASHBOARD_PORT, run_dashboard
from .errors import ExposeError, InvalidHostname, NotConfigured
from .logs import follow_log, read_log
from .orchestrator import Orchestrator
from .output import emit_result, print_error, print_info, print_servers
from .structured_logging import setup_logging

HELP_EPILOG = """
hostname format:
  demo                    -> https://demo.<domain>
  api.local               -> https://api.local.<domain>   (two labels still use the default domain)
  test.other.com          -> https://test.other.com
  api.staging.site.io     -> https://api.staging.site.io

All commands print a JSON result on stdout; progress and errors go to stderr.

environment:
  EXPOSE_DOMAIN, EXPOSE_TUNNEL_NAME, EXPOSE_BASE_PORT   override ~/.expose/config.json
  EXPOSE_HOME                                           state directory (default ~/.expose)
  EXPOSE_LOG_LEVEL, EXPOSE_LOG_FORMAT, EXPOSE_LOG_FILE  diagnostics logging
"""


def handle_init(config: ExposeConfig, domain: str | None) -> dict:
    """Handle expose init - persist the default domain"""
    if domain:
        if "/" in domain or domain.startswith("http"):
            raise InvalidHostname("Domain must be a hostname only (no scheme or path)")
        new_config = config.with_domain(domain.strip().lower())
        path = save_config(new_config)
        return {"message": "Configuration saved", "config": new_config.to_dict(), "configFile": str(path)}

    if config.config_file.exists() and config.is_configured:
        return {"message": "Already configured", "config": config.to_dict(), "configFile": str(config.config_file)}

    raise NotConfigured(
        "expose needs to be configured before first use",
        hint=(
            "Run: expose init <your-domain.com>\n"
            "Or set EXPOSE_DOMAIN (and optionally EXPOSE_TUNNEL_NAME, EXPOSE_BASE_PORT)"
        ),
    )


def handle_logs(orchestrator: Orchestrator, name: str, lines: int, follow: bool) -> None:
    key, _server = orchestrator.resolve(name)
    log_path = orchestrator.config.log_path(key)
    sys.stdout.write(read_log(log_path, lines))
    sys.stdout.flush()
    if follow:
        follow_log(log_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expose",
        description="expose - Expose local directories to the internet via Cloudflare Tunnel",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", "-v", action="version", version=f"expose version {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    init_parser = subparsers.add_parser("init", help="Configure your default domain")
    init_parser.add_argument("domain", nargs="?", help="Default domain (e.g. mycompany.com)")

    subparsers.add_parser("config", help="Show current configuration")

    start_parser = subparsers.add_parser("start", help="Start serving a directory")
    start_parser.add_argument("name", help="Subdomain or full hostname")
    start_parser.add_argument("--port", "-p", type=int, help="Expose an existing service on this port")
    start_parser.add_argument("--dedicated", action="store_true", help="Create a dedicated tunnel (not shared)")
    start_parser.add_argument("--dir", "-d", default=None, help="Directory to serve (default: current)")

    stop_parser = subparsers.add_parser("stop", help="Stop a running server")
    stop_parser.add_argument("name", help="Subdomain, state key or full hostname")

    list_parser = subparsers.add_parser("list", help="List all running servers")
    list_parser.add_argument("--table", action="store_true", help="Also render a table on stderr")

    subparsers.add_parser("status", help="Show tunnel and server status")

    logs_parser = subparsers.add_parser("logs", help="View logs for a server")
    logs_parser.add_argument("name", help="Subdomain, state key or full hostname")
    logs_parser.add_argument("-n", "--lines", type=int, default=0, help="Only show the last N lines")
    logs_parser.add_argument("-f", "--follow", action="store_true", help="Follow log output (like tail -f)")

    dashboard_parser = subparsers.add_parser("dashboard", aliases=["ui"], help="Start the web dashboard")
    dashboard_parser.add_argument("port", nargs="?", type=int, default=DEFAULT_DASHBOARD_PORT)

    subparsers.add_parser("version", help="Show version information")

    return parser


def run_command(args, config: ExposeConfig) -> int:
    orchestrator = Orchestrator(config)

    if args.command == "init":
        emit_result(handle_init(config, args.domain))
    elif args.command == "config":
        emit_result(
            {
                "config": config.to_dict(),
                "configFile": str(config.config_file),
                "environment": environment_overrides(),
            }
        )
    elif args.command == "start":
        if not config.is_configured:
            raise NotConfigured("expose is not configured", hint="Run: expose init <your-domain.com>")
        directory = Path(args.dir) if args.dir else Path(os.getcwd())
        emit_result(orchestrator.start(args.name, directory, dedicated=args.dedicated, external_port=args.port))
    elif args.command == "stop":
        emit_result(orchestrator.stop(args.name))
    elif args.command == "list":
        servers = orchestrator.list_servers()
        if args.table:
            print_servers(servers)
        if servers:
            emit_result({"servers": servers})
        else:
            emit_result({"servers": [], "message": "No servers currently running"})
    elif args.command == "status":
        emit_result(orchestrator.status())
    elif args.command == "logs":
        handle_logs(orchestrator, args.name, args.lines, args.follow)
    elif args.command in ("dashboard", "ui"):
        print_info(f"Starting expose dashboard on http://localhost:{args.port}")
        print_info("Press Ctrl+C to stop")
        run_dashboard(orchestrator, args.port)
    elif args.command == "version":
        print(f"expose version {__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging()

    try:
        return run_command(args, load_config())
    except ExposeError as e:
        print_error(e.message)
        if e.hint:
            print_info(e.hint)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
