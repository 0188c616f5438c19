from __future__ import annotations
import argparse
import sys
from datetime import date, datetime
from pathlib import Path

from .config import Settings, get_settings
from .csv_io import employee_label, export_requests, export_totals
from .dates import localize, parse_clock, zone
from .errors import TimeOffError, ValidationError
from .logging import configure_logging
from .models import RequestDraft, Shift, TimeOffKind
from .monitoring import configure_error_monitoring
from .roster import sign_in, sync_roster
from .service import requests_for, submit_request
from .shifts import add_shift, remove_shift, shifts_for
from .storage import RecordStore
from .totals import aggregate, totals_rows


def store_from_args(args: argparse.Namespace) -> RecordStore:
    return RecordStore(Path(args.data) if args.data else get_settings().data_path)


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def parse_kind(value: str) -> TimeOffKind:
    kind = TimeOffKind.parse(value)
    if kind is None:
        raise argparse.ArgumentTypeError(f"unknown time-off kind {value!r}")
    return kind


def parse_now(args: argparse.Namespace, settings: Settings) -> datetime:
    if args.now:
        return localize(datetime.fromisoformat(args.now), zone(settings.timezone))
    return datetime.now(zone(settings.timezone))


def format_hours(value) -> str:
    return "-" if value is None else f"{value:g}h"


def cmd_sync_roster(args: argparse.Namespace) -> int:
    settings = get_settings()
    source = args.source or settings.roster_source
    if not source:
        raise ValidationError("No roster source given and TIMEOFF_ROSTER_SOURCE is not set")
    store = store_from_args(args)
    if not sync_roster(store, source, timeout=settings.roster_timeout):
        print(f"Roster not available from {source}; keeping {len(store.employees)} employees")
        return 1
    print(f"Synced {len(store.employees)} employees from {source}")
    return 0


def cmd_login(args: argparse.Namespace) -> int:
    session = sign_in(store_from_args(args), args.name, args.password, get_settings())
    role = "administrator" if session.is_admin else "employee"
    print(f"Signed in as {session.employee.name} ({session.employee.id}), {role}")
    return 0


def cmd_list_employees(args: argparse.Namespace) -> int:
    store = store_from_args(args)
    for employee in store.list_employees():
        print(
            f"{employee.id} {employee.name} position: {employee.position or '-'} "
            f"PTO: {format_hours(employee.pto_hours)} PSL: {format_hours(employee.psl_hours)}"
        )
    return 0


def cmd_find_employee(args: argparse.Namespace) -> int:
    store = store_from_args(args)
    employee = store.find_employee_by_name(args.name)
    if employee is None:
        print("Name not found. Please enter the full name as it appears in the roster.")
        return 1
    print(f"{employee.id} {employee.name}")
    return 0


def cmd_request(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = store_from_args(args)
    full_day = args.start_time is None and args.end_time is None
    draft = RequestDraft(
        kind=args.kind,
        employee_id=args.employee,
        start_date=args.start_date,
        end_date=args.end_date or args.start_date,
        full_day=full_day,
        start_time=args.start_time,
        end_time=args.end_time,
        notes=args.notes or "",
    )
    decision = submit_request(
        store, draft, now=parse_now(args, settings), settings=settings, record_denials=not args.no_record_denials
    )
    if not decision.approved:
        for reason in decision.reasons:
            print(f"Rejected: {reason}")
        return 1
    record = decision.record
    print(f"Recorded {record.kind.value} request {record.id} for {record.hours:g} hours ({record.status.value})")
    if record.verification_needed:
        print("Verification needed: sick leave longer than three days")
    return 0


def cmd_requests(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = store_from_args(args)
    tz = zone(settings.timezone)
    for request in requests_for(store, args.employee, args.year, settings):
        kind = request.kind.value if isinstance(request.kind, TimeOffKind) else request.kind
        print(
            f"{localize(request.start, tz):%Y-%m-%d %H:%M} -> {localize(request.end, tz):%Y-%m-%d %H:%M} "
            f"{kind} {employee_label(store.employees, request.employee_id)} "
            f"{request.hours:g}h {request.status.value}"
        )
    return 0


def _totals(args: argparse.Namespace):
    settings = get_settings()
    store = store_from_args(args)
    totals = aggregate(args.year, store.time_off_requests, store.employees.values(), parse_now(args, settings), settings)
    return totals_rows(totals, args.year, args.kind)


def cmd_totals(args: argparse.Namespace) -> int:
    for row in _totals(args):
        print(
            f"{row['Year']} {row['Employee']} ({row['Position'] or '-'}) "
            f"requested: {row['Requested(hrs)']:g}h approved: {row['Approved(hrs)']:g}h taken: {row['Taken(hrs)']:g}h"
        )
    return 0


def cmd_export_totals(args: argparse.Namespace) -> int:
    path = export_totals(Path(args.path), _totals(args))
    print(f"Exported totals to {path}")
    return 0


def cmd_export_requests(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = store_from_args(args)
    path = export_requests(Path(args.path), requests_for(store, args.employee, args.year, settings), store.employees, settings)
    print(f"Exported requests to {path}")
    return 0


def cmd_add_shift(args: argparse.Namespace) -> int:
    store = store_from_args(args)
    shift = add_shift(
        store,
        Shift(
            employee_name=args.name.strip(),
            day=args.date,
            start_time=args.start,
            end_time=args.end,
            notes=(args.notes or "").strip(),
        ),
    )
    print(f"Added shift for {shift.employee_name} on {shift.day} {shift.start_time:%H:%M}-{shift.end_time:%H:%M}")
    return 0


def cmd_shifts(args: argparse.Namespace) -> int:
    store = store_from_args(args)
    positions = {id(shift): index for index, shift in enumerate(store.shifts)}
    for shift in shifts_for(store, args.date):
        text = f"[{positions[id(shift)]}] {shift.day}: {shift.employee_name} {shift.start_time:%H:%M}-{shift.end_time:%H:%M}"
        if shift.notes:
            text += f" - {shift.notes}"
        print(text)
    return 0


def cmd_remove_shift(args: argparse.Namespace) -> int:
    store = store_from_args(args)
    shift = remove_shift(store, args.index)
    print(f"Removed shift for {shift.employee_name} on {shift.day}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Marina staff time-off tracker")
    parser.add_argument("--data", help="Record store path (defaults to TIMEOFF_DATA_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    roster = sub.add_parser("sync-roster", help="Replace employees from a roster file or URL")
    roster.add_argument("source", nargs="?")
    roster.set_defaults(func=cmd_sync_roster)

    login = sub.add_parser("login", help="Check a name and the shared password against the roster")
    login.add_argument("name")
    login.add_argument("--password", required=True)
    login.set_defaults(func=cmd_login)

    employees = sub.add_parser("list-employees", help="List employees and balances")
    employees.set_defaults(func=cmd_list_employees)

    find = sub.add_parser("find-employee", help="Look up an employee by full name")
    find.add_argument("name")
    find.set_defaults(func=cmd_find_employee)

    request = sub.add_parser("request", help="Submit a time-off request")
    request.add_argument("kind", type=parse_kind, help="PTO, SICK or PFML")
    request.add_argument("employee", help="Employee id")
    request.add_argument("start_date", type=parse_date)
    request.add_argument("end_date", nargs="?", type=parse_date)
    request.add_argument("--start-time", type=parse_clock, help="HH:MM, for partial-day requests")
    request.add_argument("--end-time", type=parse_clock, help="HH:MM, for partial-day requests")
    request.add_argument("--notes")
    request.add_argument("--now", help="Evaluate as of this ISO datetime")
    request.add_argument("--no-record-denials", action="store_true", help="Do not store denied requests")
    request.set_defaults(func=cmd_request)

    listing = sub.add_parser("requests", help="List stored requests")
    listing.add_argument("--employee")
    listing.add_argument("--year", type=int)
    listing.set_defaults(func=cmd_requests)

    for name, func, help_text in (
        ("totals", cmd_totals, "Show yearly totals per employee"),
        ("export-totals", cmd_export_totals, "Export yearly totals to CSV"),
    ):
        totals = sub.add_parser(name, help=help_text)
        totals.add_argument("year", type=int)
        if name == "export-totals":
            totals.add_argument("path")
        totals.add_argument("--kind", type=parse_kind, default=TimeOffKind.PTO)
        totals.add_argument("--now", help="Count time taken as of this ISO datetime")
        totals.set_defaults(func=func)

    export = sub.add_parser("export-requests", help="Export requests to CSV")
    export.add_argument("path")
    export.add_argument("--employee")
    export.add_argument("--year", type=int)
    export.set_defaults(func=cmd_export_requests)

    shift = sub.add_parser("add-shift", help="Schedule an employee shift")
    shift.add_argument("name")
    shift.add_argument("date", type=parse_date)
    shift.add_argument("start", type=parse_clock, help="HH:MM")
    shift.add_argument("end", type=parse_clock, help="HH:MM")
    shift.add_argument("--notes")
    shift.set_defaults(func=cmd_add_shift)

    shifts = sub.add_parser("shifts", help="List scheduled shifts")
    shifts.add_argument("--date", type=parse_date)
    shifts.set_defaults(func=cmd_shifts)

    remove = sub.add_parser("remove-shift", help="Remove a shift by its listed position")
    remove.add_argument("index", type=int)
    remove.set_defaults(func=cmd_remove_shift)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    configure_error_monitoring(settings)
    try:
        return args.func(args)
    except TimeOffError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
