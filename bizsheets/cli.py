#!/usr/bin/env python3
"""
BizSheets command line.

Inspect the spreadsheet-backed records or run the API server.
"""
import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from bizsheets.config_manager import get_config_manager
from bizsheets.services.records import search_records
from bizsheets.services.sheets import SheetsError

ENTITIES = ('customers', 'suppliers', 'users', 'payments', 'receipts')


def list_ranges():
    """Print every configured record range."""
    config_mgr = get_config_manager()
    print("=" * 70)
    print("Configured ranges")
    print("=" * 70)
    for range_id in config_mgr.list_ranges():
        range_config = config_mgr.get_range(range_id)
        print(f"• {range_config.id}")
        print(f"  Range: {range_config.range}  Sheet: {range_config.sheet}")
        print(f"  Id field: {range_config.id_field} ({range_config.id_prefix}...)")
    print(f"\nId scheme: {config_mgr.id_scheme}")


def list_records(entity: str, search: str = "", column: str = "All") -> int:
    from bizsheets.app import get_services

    service = getattr(get_services(), entity)
    records = search_records(service.list(), search, column)
    print(json.dumps(records, indent=2, default=str))
    print(f"\n{len(records)} {entity}", file=sys.stderr)
    return 0


def show_dashboard() -> int:
    from bizsheets.app import get_services

    print(json.dumps(get_services().dashboard.run(), indent=2, default=str))
    return 0


def serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("bizsheets.app:app", host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bizsheets",
        description="BizSheets - business records kept in Google Sheets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bizsheets ranges
  bizsheets list customers --search austin --column City
  bizsheets dashboard
  bizsheets serve --port 8000

Environment variables (.env file):
  SPREADSHEET_ID=your-spreadsheet-id
  SHEETS_ACCESS_TOKEN=ya29....            (or)
  SERVICE_ACCOUNT_CREDENTIALS='{"type": "service_account", ...}'
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Log API calls')
    sub = parser.add_subparsers(dest='command')

    sub.add_parser('ranges', help='List configured ranges')

    list_parser = sub.add_parser('list', help='Print records of one type as JSON')
    list_parser.add_argument('entity', choices=ENTITIES)
    list_parser.add_argument('--search', default='', help='Case-insensitive substring')
    list_parser.add_argument('--column', default='All', help="Column to search (default: All)")

    sub.add_parser('dashboard', help='Print dashboard KPIs and series as JSON')

    serve_parser = sub.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default='127.0.0.1')
    serve_parser.add_argument('--port', type=int, default=8000)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'ranges':
            list_ranges()
            return 0
        if args.command == 'list':
            return list_records(args.entity, args.search, args.column)
        if args.command == 'dashboard':
            return show_dashboard()
        if args.command == 'serve':
            return serve(args.host, args.port)
    except (SheetsError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
