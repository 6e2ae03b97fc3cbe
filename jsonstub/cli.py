"""jsonstub command line."""

import argparse
import sys

from jsonstub.base.config import get_config
from jsonstub.data.config_store import ConfigStore
from jsonstub.data.route_table import RouteTable


def run_server(args):
    """Run the HTTP server in the foreground."""
    from jsonstub.server.api import serve

    serve(port=args.port, host=args.host)


def show_routes(args):
    """Print the endpoints and route table as the server would see them."""
    config = get_config()
    store = ConfigStore(config.storage.config_dir)
    print(f"config:  {config.storage.config_dir}")
    print(f"content: {config.storage.content_dir}")
    print(f"ping:    GET  {store.ping_endpoint()}")
    print(f"refresh: POST {store.refresh_endpoint()}")
    mappings = RouteTable(store).all()
    if not mappings:
        print("(no route mappings)")
    for m in mappings:
        print(f"{m.method:<5} {m.path} -> {m.file}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="jsonstub", description="Development JSON stub server")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the stub server")
    serve_parser.add_argument("--host", help="Listen address (default JSONSTUB_API_HOST or 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, help="Listen port (default JSONSTUB_API_PORT or 3000)")
    serve_parser.set_defaults(func=run_server)

    routes_parser = subparsers.add_parser("routes", help="Show configured endpoints and mappings")
    routes_parser.set_defaults(func=show_routes)

    args = parser.parse_args(argv)

    if hasattr(args, "func"):
        args.func(args)
        return 0
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
