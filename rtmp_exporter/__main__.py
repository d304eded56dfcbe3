"""Entry point — python -m rtmp_exporter."""

from __future__ import annotations

import argparse
import asyncio
import sys

import yaml


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtmp-exporter",
        description="Prometheus exporter for nginx_rtmp_module stats",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration YAML file",
        default=None,
    )
    parser.add_argument(
        "--listen-port",
        type=int,
        help="Port to listen on to expose /metrics",
    )
    parser.add_argument(
        "--stats-url",
        help="URL to get the nginx rtmp stats from",
    )
    parser.add_argument(
        "--stats-file",
        help="File on disk to get the stats from rather than the URL",
    )
    parser.add_argument(
        "--stats-timeout",
        type=float,
        help="Timeout in seconds to retrieve rtmp stats",
    )
    parser.add_argument(
        "--log-level",
        help="Only log messages with the given severity or above",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, dict]:
    """Map command line flags onto config sections."""
    return {
        "stats": {
            "url": args.stats_url,
            "file": args.stats_file,
            "timeout": args.stats_timeout,
        },
        "api": {"port": args.listen_port},
        "logging": {"level": args.log_level},
    }


def main() -> None:
    args = build_parser().parse_args()

    from rtmp_exporter.app import Application

    try:
        app = Application(config_path=args.config,
                          overrides=overrides_from_args(args))
    except (ValueError, OSError, yaml.YAMLError) as exc:
        print(f"rtmp-exporter: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(app.start())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
