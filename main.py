"""Command line entrypoint for running the Wardrobe Planner locally."""

from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from models.clothing import wear_entry_to_dict
from server.api import day_to_dict
from wardrobe_app.app import WardrobeApp


def _print(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wardrobe-planner", description="Personal wardrobe planner")
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("reconcile", help="Move past outfit plans into the wear log")
    subcommands.add_parser("alerts", help="List items left in the laundry too long")

    insights = subcommands.add_parser("insights", help="Most worn items")
    insights.add_argument("--limit", type=int, default=10)

    day = subcommands.add_parser("day", help="Show the outfit for a day")
    day.add_argument("date", nargs="?", help="YYYY-MM-DD, defaults to today")

    serve = subcommands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("server.api:create_api", factory=True, host=args.host, port=args.port, reload=False)
        return 0

    # Constructing the app already reconciles past plans.
    app = WardrobeApp()
    try:
        if args.command == "reconcile":
            result = app.last_reconcile
            _print(
                {
                    "migratedDates": result.migrated_dates,
                    "skippedDates": result.skipped_dates,
                    "appended": [wear_entry_to_dict(entry) for entry in result.appended_entries],
                    "transitionedItemIds": result.transitioned_item_ids,
                    "missingItemIds": result.missing_item_ids,
                }
            )
        elif args.command == "alerts":
            _print([note.message for note in app.laundry_notifications])
        elif args.command == "insights":
            _print([{"name": entry.item.name, "count": entry.count} for entry in app.insights(args.limit)])
        elif args.command == "day":
            try:
                view = app.day_view(args.date)
            except ValueError as exc:
                print(f"error: {exc}")
                return 2
            payload = day_to_dict(view)
            payload["items"] = [item["name"] for item in payload["items"]]
            _print(payload)
    finally:
        app.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
