#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Command line
Run the dashboard, print a topic's heatmap, export and import data

Version: 1.0.0
"""

import os
import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SettingsError

from core.exceptions import TopicNotFoundError, TrackerError, ValidationError
from dashboard.app import run_dashboard
from dashboard.config import DashboardSettings, get_settings
from services import ServiceManager
from ui.heatmap_text import render_topic
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heatmap-tracker",
        description="Heatmap Tracker - personal habit and metric tracker"
    )
    parser.add_argument("--data-file", type=Path, help="JSON data file (file backend)")
    parser.add_argument("--backend", choices=["memory", "file"], help="Storage backend")
    parser.add_argument("--timezone", help="Timezone deciding which date is today")
    parser.add_argument("--log-level", help="Log level")

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the web dashboard")
    serve.add_argument("--host", help="Host to bind")
    serve.add_argument("--port", type=int, help="Port to listen on")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    commands.add_parser("list", help="List topics")
    commands.add_parser("backups", help="List data file backups, newest first")

    show = commands.add_parser("show", help="Print a topic heatmap")
    show.add_argument("topic", help="Topic id or name")

    export = commands.add_parser("export", help="Write every topic as JSON")
    export.add_argument("output", nargs="?", type=Path, help="Output file (stdout when omitted)")

    load = commands.add_parser("import", help="Replace every topic with an export file")
    load.add_argument("input", type=Path, help="Export file to import")

    return parser


# argparse dest -> settings field
CLI_OVERRIDES = {
    "data_file": "DATA_FILE",
    "backend": "STORAGE_BACKEND",
    "timezone": "TIMEZONE",
    "log_level": "LOG_LEVEL",
}


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        field: getattr(args, dest)
        for dest, field in CLI_OVERRIDES.items()
        if getattr(args, dest) is not None
    }


def load_settings(args: argparse.Namespace) -> DashboardSettings:
    """Settings from the environment, with command line overrides"""
    return DashboardSettings(**settings_overrides(args))


def export_overrides(overrides: Dict[str, Any]) -> None:
    """uvicorn builds the app from the environment, so serve passes overrides there"""
    for field, value in overrides.items():
        os.environ[f"HEATMAP_{field}"] = str(value)
    get_settings.cache_clear()


def find_topic(services: ServiceManager, key: str):
    for topic in services.store.list_topics():
        if topic.id == key or topic.name.lower() == key.lower():
            return topic
    raise TopicNotFoundError(key)


def cmd_list(services: ServiceManager, args) -> int:
    for topic in services.store.list_topics():
        print(f"{topic.id}  {topic.name} ({topic.unit}), {topic.entry_count} entries")
    return 0


def cmd_backups(services: ServiceManager, args) -> int:
    backups = services.store.list_backups()
    if not backups:
        print("No backups")
    for backup in backups:
        print(f"{backup['name']}  {backup['size_bytes']} bytes")
    return 0


def cmd_show(services: ServiceManager, args) -> int:
    topic = find_topic(services, args.topic)
    topic, projection = services.topic_service.view(topic.id)
    print(render_topic(topic, projection))
    return 0


def cmd_export(services: ServiceManager, args) -> int:
    payload = json.dumps(services.store.export_data(), ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"Exported {len(services.store)} topics to {args.output}")
    else:
        print(payload)
    return 0


def cmd_import(services: ServiceManager, args) -> int:
    try:
        payload = json.loads(args.input.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    topics = services.store.import_data(payload)
    print(f"Successfully imported {len(topics)} topics")
    return 0


COMMANDS = {
    "list": cmd_list,
    "backups": cmd_backups,
    "show": cmd_show,
    "export": cmd_export,
    "import": cmd_import,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
    except SettingsError as e:
        print(f"Error: invalid settings\n{e}", file=sys.stderr)
        return 2

    if args.command == "serve":
        export_overrides(settings_overrides(args))
        run_dashboard(settings, host=args.host, port=args.port, reload=args.reload)
        return 0

    # stdout is reserved for command output
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_FILE, stream=sys.stderr)

    try:
        with ServiceManager(settings) as services:
            return COMMANDS[args.command](services, args)
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        for problem in e.errors:
            print(f"  [{problem['index']}] {problem['field']}: {problem['message']}", file=sys.stderr)
        return 1
    except TrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
