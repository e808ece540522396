"""
Keyword Collector Web API - Startup Script
"""

import argparse
from pathlib import Path

from collector.collector import setup_logging
from settings import build_services, load_config
from web.app import app, configure, socketio


def main():
    parser = argparse.ArgumentParser(description="Keyword collector web API")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--log-file", default="logs/web.log")
    args = parser.parse_args()

    setup_logging(Path(args.log_file))
    configure(build_services(load_config(args.config)))

    print("=" * 50)
    print("  Keyword Collector Web API")
    print("=" * 50)
    print()
    print(f"  http://localhost:{args.port}")
    print()
    print("  Ctrl+C to stop")
    print("=" * 50)

    # Werkzeug dev server
    socketio.run(
        app,
        host=args.host,
        port=args.port,
        debug=False,
        use_reloader=False,
        allow_unsafe_werkzeug=True,
    )


if __name__ == '__main__':
    main()
