from __future__ import annotations

import argparse
import os
import sys

from excel_analytics_dashboard.version import APP_TITLE, BUILD_VERSION


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="excel-analytics-dashboard", description=APP_TITLE)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8050)
    parser.add_argument("--api-url", default="", help="Base URL of the upload/history service.")
    parser.add_argument(
        "--token",
        default=os.environ.get("EXCEL_ANALYTICS_TOKEN", ""),
        help="Bearer token; the sign-in panel is shown when omitted.",
    )
    parser.add_argument("--debug", action="store_true", default=False)
    parser.add_argument("--version", action="version", version=f"{APP_TITLE} {BUILD_VERSION}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))

    from excel_analytics_dashboard.ui.dash_app import main as dash_main

    dash_main(
        token=args.token or None,
        api_url=args.api_url or None,
        host=args.host,
        port=args.port,
        debug=args.debug,
        use_reloader=False,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
