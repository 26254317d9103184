# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""passivescan CLI."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from ..config import load_scan_settings
from ..errors import PassiveScanError
from ..http.models import HttpMessage
from ..log import setup_logging
from ..model.session import load_session
from ..pscan.data import PassiveScanData
from ..pscan.runner import PassiveScanRunner
from ..users.manager import load_user_management

CLI_EVIDENCE_TRUNCATION = 200


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve the site context of a captured HTTP message and run passive scan rules on it"
    )
    parser.add_argument("message", help="JSON file describing the captured message ('-' reads stdin)")
    parser.add_argument(
        "--contexts",
        help="JSON file with context definitions (defaults to $PASSIVESCAN_CONTEXTS_FILE)",
    )
    parser.add_argument("--users", help="JSON file with user definitions")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument("--log-level", help="Logging level (defaults to $PASSIVESCAN_LOG_LEVEL or WARNING)")
    return parser


def _read_message(source: str) -> HttpMessage:
    raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("message JSON must be an object")
    return HttpMessage.from_mapping(data)


def describe(data: PassiveScanData) -> dict[str, Any]:
    """Summarize the derived facts for one message."""
    context = data.context
    message = data.message
    return {
        "url": message.request.url,
        "has_context": data.has_context(),
        "context": None if context is None else {"id": context.id, "name": getattr(context, "name", "")},
        "tech_set": data.tech_set.to_dict(),
        "users": [user.to_dict() for user in data.get_users()],
        "pages": {
            "200": data.is_page_200(message),
            "404": data.is_page_404(message),
            "500": data.is_page_500(message),
            "other": data.is_page_other(message),
        },
    }


def _truncate(text: str, limit: int = CLI_EVIDENCE_TRUNCATION) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _pretty_print(report: dict[str, Any]) -> None:
    facts = report["facts"]
    context = facts["context"]
    print(f"[passivescan] {facts['url']}")
    print(f"Context: {context['name'] if context else '-'}")
    included = facts["tech_set"]["include"]
    print(f"Technologies: {len(included)} included, {len(facts['tech_set']['exclude'])} excluded")
    users = [user["name"] for user in facts["users"]]
    print(f"Users: {', '.join(users) if users else '-'}")
    matched = [kind for kind, value in facts["pages"].items() if value]
    print(f"Page classification: {', '.join(matched) if matched else '-'}")
    alerts = report["scan"]["alerts"]
    if not alerts:
        print("Alerts: none")
    else:
        print("Alerts:")
        for alert in alerts:
            print(f"- [{alert['risk']}/{alert['confidence']}] {alert['name']}: {_truncate(alert['evidence'])}")
    if report["scan"]["rule_errors"]:
        print(f"Rule errors: {', '.join(report['scan']['rule_errors'])}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = load_scan_settings()
    contexts_file = args.contexts or settings.contexts_file
    if not contexts_file:
        parser.error("--contexts is required when PASSIVESCAN_CONTEXTS_FILE is not set")

    try:
        session = load_session(contexts_file, strip_query=settings.strip_query)
        user_management = load_user_management(args.users) if args.users else None
        message = _read_message(args.message)
    except (PassiveScanError, ValueError, OSError) as exc:
        print(f"passivescan: error: {exc}", file=sys.stderr)
        return 2

    runner = PassiveScanRunner(session, user_management=user_management)
    data = runner.scan_data(message)
    report = {
        "facts": describe(data),
        "scan": runner.scan(message, data).to_dict(),
    }

    if args.json:
        json.dump(report, sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
    else:
        _pretty_print(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
