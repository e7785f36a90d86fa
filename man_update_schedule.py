#!/usr/bin/env python3
"""
Manual Schedule Update Tool
Command-line interface for regenerating and adjusting the driver rotation.
"""

import argparse
import sys
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from ops_data import OpsData
from ops_models import ScheduleEntry
from ops_store import ConfigError, OpsError, ValidationAbort
from schedule_generator import DAY_NAMES


def parse_weekdays(value: str) -> List[int]:
    """Parse '0,6' or 'sun,sat' into weekday numbers (0=Sunday)."""
    days = []
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        if part.isdigit():
            days.append(int(part))
            continue
        matches = [i for i, name in enumerate(DAY_NAMES) if name.lower().startswith(part.lower())]
        if len(matches) != 1:
            raise argparse.ArgumentTypeError(f"Unknown weekday: {part}")
        days.append(matches[0])
    return days


def format_schedule(entries: List[ScheduleEntry]) -> str:
    """Render entries as one block per date: '  Driver -> Location'."""
    if not entries:
        return "  No schedule entries."

    by_date: Dict[str, List[ScheduleEntry]] = OrderedDict()
    for entry in sorted(entries, key=lambda e: e.date):
        by_date.setdefault(entry.date, []).append(entry)

    lines = []
    for day, day_entries in by_date.items():
        lines.append(f"  {day}")
        for entry in sorted(day_entries, key=lambda e: e.driver_name):
            lines.append(f"    {entry.driver_name:<20} -> {entry.location_name}")
    return "\n".join(lines)


class ManualScheduleUpdater:
    """Command-line tool for manual schedule updates."""

    def __init__(self, is_prod: bool = False, ops: Optional[OpsData] = None,
                 confirm: Callable[[str], str] = input):
        """
        Initialize the schedule updater.

        Args:
            is_prod: If True, destructive commands ask for confirmation first
            ops: Loaded OpsData (default: built from the environment and fetched)
            confirm: Reads the confirmation answer
        """
        self.is_prod = is_prod
        self.confirm = confirm
        if ops is None:
            ops = OpsData()
            ops.fetch_all()
            if ops.error:
                raise ops.error
        self.ops = ops

    def _confirmed(self) -> bool:
        if not self.is_prod:
            return True
        answer = self.confirm("\n⚠️  PRODUCTION MODE - Are you sure? (yes/no): ")
        if answer.lower() != 'yes':
            print("Command cancelled.")
            return False
        return True

    def generate(self, rotation_interval: int, excluded_days: List[int]) -> dict:
        excluded_names = ', '.join(DAY_NAMES[d] for d in sorted(set(excluded_days)) if 0 <= d <= 6) or 'none'
        print("\nGenerating schedule:")
        print(f"  Rotation interval: {rotation_interval} day(s)")
        print(f"  Excluded days: {excluded_names}")

        if not self._confirmed():
            return {'success': False, 'error': 'User cancelled'}

        schedule = self.ops.generate_schedule(rotation_interval, excluded_days)
        return {'success': True, 'entries': len(schedule)}

    def override(self, driver_id: str, location_id: str) -> dict:
        print("\nMoving driver for today:")
        print(f"  Driver: {driver_id}")
        print(f"  Location: {location_id}")

        if not self._confirmed():
            return {'success': False, 'error': 'User cancelled'}

        entry = self.ops.update_schedule_for_driver_today(driver_id, location_id)
        if entry is None:
            return {'success': False, 'error': f'Unknown location: {location_id}'}
        return {'success': True, 'entry': entry.to_dict()}

    def clear(self) -> dict:
        print("\nClearing the whole schedule")
        if not self._confirmed():
            return {'success': False, 'error': 'User cancelled'}
        self.ops.clear_schedule()
        return {'success': True}

    def show(self, day: Optional[str] = None) -> dict:
        entries = self.ops.schedule
        if day:
            entries = [e for e in entries if e.date == day]
        print(f"\nSchedule{' for ' + day if day else ''}:")
        print(format_schedule(entries))
        return {'success': True, 'entries': len(entries)}

    def _print_result(self, result: dict):
        """Print command result."""
        print("\nResult:")
        if result.get('success'):
            print("  ✓ SUCCESS")
            if 'entries' in result:
                print(f"  Entries: {result['entries']}")
        else:
            print("  ✗ FAILED")
            if 'error' in result:
                print(f"  Error: {result['error']}")


def main(argv=None, updater_factory=ManualScheduleUpdater):
    """Main entry point for command-line interface."""
    parser = argparse.ArgumentParser(
        description='Manual Schedule Update Tool - Regenerate and adjust the driver rotation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Rotate every 2 scheduled days, never scheduling Sundays
  python man_update_schedule.py generate --interval 2 --exclude sun

  # Send a driver to another location for today only
  python man_update_schedule.py override --driver <driver-id> --location <location-id>

  # Same as above but asking for confirmation (--prod comes BEFORE the command)
  python man_update_schedule.py --prod clear

  # Show the schedule for one day
  python man_update_schedule.py show --date 2026-10-19

Environment Variables:
  SUPABASE_URL, SUPABASE_KEY - Required. Credentials of the hosted store.
  Set in .env file or with: export SUPABASE_URL='https://...'
        """
    )

    parser.add_argument('--prod', action='store_true',
                        help='Ask for confirmation before changing the schedule')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    generate_parser = subparsers.add_parser('generate', help='Regenerate the rotation')
    generate_parser.add_argument('--interval', type=int, required=True,
                                 help='Scheduled days spent at each location')
    generate_parser.add_argument('--exclude', type=parse_weekdays, default=[],
                                 help='Weekdays to skip, e.g. "0,6" or "sun,sat"')

    override_parser = subparsers.add_parser('override', help="Change a driver's location for today")
    override_parser.add_argument('--driver', required=True, help='Driver id')
    override_parser.add_argument('--location', required=True, help='Location id')

    subparsers.add_parser('clear', help='Delete every schedule entry')

    show_parser = subparsers.add_parser('show', help='Print the schedule')
    show_parser.add_argument('--date', help='Only this date (YYYY-MM-DD)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        updater = updater_factory(is_prod=args.prod)

        if args.command == 'generate':
            result = updater.generate(args.interval, args.exclude)
        elif args.command == 'override':
            result = updater.override(args.driver, args.location)
        elif args.command == 'clear':
            result = updater.clear()
        else:
            result = updater.show(args.date)

        updater._print_result(result)
        return 0 if result.get('success') else 1
    except ConfigError as e:
        print(f"\n❌ Environment Error: {e}", file=sys.stderr)
        return 1
    except ValidationAbort as e:
        print(f"\n⚠️  {e}", file=sys.stderr)
        return 1
    except OpsError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
