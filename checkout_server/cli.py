"""Command-line interface for the Checkout Flows Server."""

import argparse
import asyncio
import sys


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Checkout Flows Server - hosted, integrated and subscription checkout demos"
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="Server mode: stdio (for MCP protocol) or http (for REST API)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (HTTP mode only, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (HTTP mode only, default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable hot reloading (HTTP mode only, watches for file changes)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Payment backend origin (default: $CHECKOUT_SERVER_BASE_URL)",
    )

    args = parser.parse_args()

    if args.mode == "http":
        from .http_server import run_http_server

        print(f"Starting Checkout HTTP Server on {args.host}:{args.port}")
        print(f"API documentation available at http://{args.host}:{args.port}/docs")
        run_http_server(host=args.host, port=args.port, reload=args.reload, base_url=args.base_url)
    else:
        from .server import main as server_main

        try:
            asyncio.run(server_main(base_url=args.base_url))
        except KeyboardInterrupt:
            print("\nShutting down...", file=sys.stderr)
            sys.exit(0)


if __name__ == "__main__":
    main()
