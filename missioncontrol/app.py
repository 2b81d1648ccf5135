import argparse
import json
import os
import sys
from typing import Any, Dict, Optional

from . import __version__
from .database import init_database, reset_engine
from .env import get_db_path, load_env
from .errors import InvalidRequestError, responds
from .handlers import dispatch
from .logger import get_logger
from .repository import JobRepository
from .schema import coerce_str


class _Outcome:
    """Response sink that remembers the single call it receives."""

    def __init__(self):
        self.ok = False
        self.payload: Optional[Dict[str, Any]] = None
        self.error: Optional[Dict[str, Any]] = None

    def __call__(self, ok, payload, error):
        self.ok = ok
        self.payload = payload
        self.error = error


def _call(method: str, params: Dict[str, Any]) -> None:
    outcome = _Outcome()
    dispatch(method, params, outcome)
    if outcome.ok:
        print(json.dumps(outcome.payload, indent=2))
        return
    print(json.dumps(outcome.error, indent=2))
    raise SystemExit(1)


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = get_db_path()
    engine = init_database(db_path)
    engine.dispose()
    print(f"Initialized {db_path}")


def cmd_list(args: argparse.Namespace) -> None:
    _call("missionControl.list", {})


def cmd_get(args: argparse.Namespace) -> None:
    _call("missionControl.get", {"id": args.id})


def cmd_create(args: argparse.Namespace) -> None:
    params = {
        "type": args.type,
        "title": args.title,
        "description": args.description,
        "priority": args.priority,
        "agent_id": args.agent_id,
        "tags": args.tags,
    }
    _call("missionControl.create", {k: v for k, v in params.items() if v is not None})


def cmd_update_status(args: argparse.Namespace) -> None:
    _call("missionControl.updateStatus", {"id": args.id, "status": args.status})


def cmd_delete(args: argparse.Namespace) -> None:
    _call("missionControl.delete", {"id": args.id})


def cmd_spawn(args: argparse.Namespace) -> None:
    _call("missionControl.spawn", {})


@responds("cli.history", "Failed to read confidence history")
def _history(params: Dict[str, Any]) -> Dict[str, Any]:
    job_id = coerce_str(params.get("id"))
    if not job_id:
        raise InvalidRequestError("Missing job id")
    return {"ok": True, "history": JobRepository().confidence_history(job_id)}


def cmd_history(args: argparse.Namespace) -> None:
    outcome = _Outcome()
    _history({"id": args.id}, outcome)
    if not outcome.ok:
        print(json.dumps(outcome.error, indent=2))
        raise SystemExit(1)
    rows = outcome.payload["history"]
    if not rows:
        print(f"No confidence history for {args.id}")
        return
    for row in rows:
        print(f"{row['recorded_at']}  {row['confidence']}")


def main(argv=None):
    load_env()
    parser = argparse.ArgumentParser(prog="missioncontrol", description="Mission control job store")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite store (overrides MISSION_CONTROL_DB)")
    parser.add_argument("--metrics", action="store_true", help="Log a metrics summary on exit")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the store and its tables")
    ini.set_defaults(func=cmd_init_db)

    lst = subparsers.add_parser("list", help="List the 100 most recently created jobs")
    lst.set_defaults(func=cmd_list)

    get = subparsers.add_parser("get", help="Show a single job")
    get.add_argument("--id", required=True, help="Job id")
    get.set_defaults(func=cmd_get)

    crt = subparsers.add_parser("create", help="Create a pending job")
    crt.add_argument("--type", help="Job type (default: task)")
    crt.add_argument("--title", help="Job title")
    crt.add_argument("--description", help="Job description")
    crt.add_argument("--priority", help="Numeric priority (default: 0)")
    crt.add_argument("--agent-id", help="Agent the job is assigned to")
    crt.add_argument("--tags", help="Opaque tags string")
    crt.set_defaults(func=cmd_create)

    upd = subparsers.add_parser("update-status", help="Set a job's status")
    upd.add_argument("--id", required=True, help="Job id")
    upd.add_argument("--status", required=True, help="pending, running, review, revising, done or failed")
    upd.set_defaults(func=cmd_update_status)

    dlt = subparsers.add_parser("delete", help="Delete a job and its confidence history")
    dlt.add_argument("--id", required=True, help="Job id")
    dlt.set_defaults(func=cmd_delete)

    spn = subparsers.add_parser("spawn", help="Create and start a job (not implemented)")
    spn.set_defaults(func=cmd_spawn)

    hst = subparsers.add_parser("history", help="Show a job's confidence history")
    hst.add_argument("--id", required=True, help="Job id")
    hst.set_defaults(func=cmd_history)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if args.db:
        os.environ["MISSION_CONTROL_DB"] = args.db
        reset_engine()

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        raise SystemExit(2)

    try:
        args.func(args)
    finally:
        if args.metrics:
            get_logger().log_metrics_summary()


if __name__ == "__main__":
    main()
