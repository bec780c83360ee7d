"""NEPP portal calendar command line viewer."""

import argparse
import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from nepp_core.filters import TimeWindow
from nepp_core.formatting import event_type_label, format_relative_date, format_time
from nepp_core.month_calendar import WEEKDAY_HEADERS, DayCell, MonthGrid
from nepp_core.types import CalendarEvent
from neppweb.api_clients import (
    InMemoryEventFetchers,
    InMemoryNotificationClient,
    StaticIdentityProvider,
    load_store_from_json,
)
from neppweb.config import get_current_config
from neppweb.notifications import NotificationPoller
from neppweb.services import EventsPageController, NotAuthenticatedError

logger = logging.getLogger(__name__)

CELL_WIDTH = 5


def _cell_text(cell: DayCell) -> str:
    if not cell.in_month:
        return f"({cell.day:>2})"
    markers = ""
    if cell.has_events:
        markers += "*"
    if cell.has_announcement:
        markers += "!"
    if cell.has_form_due:
        markers += "F"
    text = f"{cell.day:>2}{markers}"
    return f"[{text}]" if cell.is_today else text


def render_grid_text(grid: MonthGrid) -> str:
    """Render a month grid as fixed-width text."""
    width = CELL_WIDTH * 7
    lines = [grid.title.center(width)]
    lines.append("".join(header.ljust(CELL_WIDTH) for header in WEEKDAY_HEADERS))
    for week in grid.weeks:
        lines.append("".join(_cell_text(cell).ljust(CELL_WIDTH) for cell in week))
    if not grid.mini:
        lines.append("* event  ! announcement  F form due  (n) other month")
    return "\n".join(lines)


def render_event_line(event: CalendarEvent) -> str:
    when = format_relative_date(event.date)
    time = format_time(event.time)
    if time:
        when = f"{when} {time}"
    parts = [f"{when:<18}", f"[{event_type_label(event.kind)}]", event.title]
    if event.location:
        parts.append(f"@ {event.location}")
    return " ".join(parts)


def parse_month(value: str) -> Tuple[int, int]:
    """Parse a ``YYYY-MM`` argument."""
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid month: '{value}'. Expected YYYY-MM."
        )
    return parsed.year, parsed.month


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="View the NEPP portal calendar for a user",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  nepp-calendar --user alice                      # Current month, all events
  nepp-calendar --user alice --month 2024-03      # A specific month
  nepp-calendar --user alice --window this-week   # Filter the list view
        """,
    )
    parser.add_argument("--user", required=True, help="User ID to sign in as")
    parser.add_argument(
        "--data-file", help="JSON seed file (defaults to PORTAL_DATA_FILE)"
    )
    parser.add_argument(
        "--month", type=parse_month, help="Month to display as YYYY-MM"
    )
    parser.add_argument(
        "--window",
        choices=[window.value for window in TimeWindow],
        help="Time window for the events list",
    )
    parser.add_argument("--group", help="Only list events for this group ID")
    parser.add_argument("--search", default="", help="Search term for the list")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    return parser


async def run(argv: Optional[Sequence[str]] = None) -> int:
    """Load the user's calendar and print it; returns the exit status."""
    args = build_parser().parse_args(argv)
    config = get_current_config()

    logging.basicConfig(level=getattr(logging, config.log_level))
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    store = load_store_from_json(args.data_file or config.portal_data_file)
    identity = StaticIdentityProvider(args.user, store)
    controller = EventsPageController(
        InMemoryEventFetchers(store),
        identity,
        upcoming_limit=config.upcoming_events_limit,
        time_window=args.window or config.default_time_window,
    )

    try:
        await controller.load_all_data()
    except NotAuthenticatedError as e:
        print(f"Error: {e}")
        return 1

    if controller.warning_message:
        print(f"Warning: {controller.warning_message}")

    if args.month:
        controller.calendar.show_month(*args.month)
    print(render_grid_text(controller.calendar.grid))
    print()

    listed: List[CalendarEvent] = controller.set_filters(
        group_id=args.group, search_term=args.search
    )
    print(f"Events ({controller.time_window.value}): {len(listed)}")
    for event in listed:
        print(f"  {render_event_line(event)}")
    print()

    print("Upcoming:")
    for event in controller.upcoming_events():
        print(f"  {render_event_line(event)}")

    poller = NotificationPoller(
        InMemoryNotificationClient(store),
        identity,
        interval=config.notification_poll_interval,
    )
    unread = await poller.poll_once()
    if unread:
        print(f"\nYou have {unread} unread notification(s)")
    return 0


def main() -> None:
    """Console script entry point."""
    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
