"""Fetch data from a Celcat calendar and print it as JSON.

Run with: celcat --username USER --password PASS calendar --start 2021-09-20T00:00 --end 2021-09-27T00:00 --id 12345
Rooms:    celcat resources --res-type room --search amphi
Event:    celcat event -- "-1347128091:-662573064:1:42367:4"

Credentials and address default to CELCAT_USERNAME, CELCAT_PASSWORD and
CELCAT_URL (a .env file in the working directory is read).

Exit codes:
  0 = success (JSON on stdout)
  1 = error (message on stderr)
"""

import argparse
import json
import sys
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from celcat.client import Celcat
from celcat.config import get_config
from celcat.entities import Kind, ResourceId, resource_kinds
from celcat.errors import CelcatError
from celcat.fetchable.calendar import CalendarData, CalendarDataRequest, CalView
from celcat.fetchable.event import SideBarEvent, SideBarEventRequest
from celcat.fetchable.resources import ResourceList, ResourceListRequest
from celcat.logging import get_logger, setup_logging

log = get_logger(__name__)

_RES_TYPES = {kind.name.lower(): kind for kind in resource_kinds()}
_VIEWS = {view.value: view for view in CalView}


def _res_type(value: str) -> Kind:
    try:
        return _RES_TYPES[value.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid resource type {value!r} (choose from {', '.join(_RES_TYPES)})"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="celcat",
        description="Fetch data from a Celcat calendar as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--url", "-a", default=None, help="Calendar base address (default: CELCAT_URL).")
    parser.add_argument("--username", "-u", default=None, help="Login name (default: CELCAT_USERNAME).")
    parser.add_argument("--password", "-p", default=None, help="Password (default: CELCAT_PASSWORD).")

    sub = parser.add_subparsers(dest="command", required=True)

    cal = sub.add_parser("calendar", help="List the courses of one resource.")
    cal.add_argument("--start", "-s", type=datetime.fromisoformat, required=True, help="Start, e.g. 2021-09-20T00:00")
    cal.add_argument("--end", "-e", type=datetime.fromisoformat, required=True, help="End, e.g. 2021-09-27T00:00")
    cal.add_argument("--id", "-i", required=True, help="Federation id of the resource.")
    cal.add_argument("--res-type", "-t", type=_res_type, default=Kind.GROUP, help="Resource type (default: group).")
    cal.add_argument("--view", choices=list(_VIEWS), default=CalView.MONTH.value, help="Calendar view (default: month).")
    cal.add_argument("--colour-scheme", type=int, default=3, help="Colour scheme sent to the service (default: 3).")

    res = sub.add_parser("resources", help="Search resources of one type.")
    res.add_argument("--res-type", "-t", type=_res_type, required=True, help="Resource type.")
    res.add_argument("--search", default="", help="Search term.")
    res.add_argument("--mine", action="store_true", help="Only my resources.")
    res.add_argument("--page-size", type=int, default=50)
    res.add_argument("--page", type=int, default=1)

    event = sub.add_parser("event", help="Show the details of one course.")
    event.add_argument("event_id", help="Course id from a calendar listing.")

    return parser


def run(args: argparse.Namespace) -> str:
    """Log in, perform the requested fetch and return it as a JSON string."""
    config = get_config()
    url = args.url or config.url
    username = args.username or config.username
    password = args.password or config.password

    with Celcat.connect(url) as celcat:
        if username:
            celcat.login(username, password)
        else:
            log.warning("login_skipped", reason="no_username")

        if args.command == "calendar":
            result = celcat.fetch(
                CalendarData,
                CalendarDataRequest(
                    start=args.start,
                    end=args.end,
                    res_type=args.res_type,
                    cal_view=_VIEWS[args.view],
                    federation_ids=ResourceId(args.res_type, args.id),
                    colour_scheme=args.colour_scheme,
                ),
            )
        elif args.command == "resources":
            result = celcat.fetch(
                ResourceList,
                ResourceListRequest(
                    my_resources=args.mine,
                    search_term=args.search,
                    page_size=args.page_size,
                    page_number=args.page,
                    res_type=args.res_type,
                ),
            )
        else:
            result = celcat.fetch(SideBarEvent, SideBarEventRequest(event_id=args.event_id))

    return json.dumps(result.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    try:
        print(run(args))
    except CelcatError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
