#!/usr/bin/env python3
"""
quake_report.py: Print the dataset status and one day's earthquakes from the command line.

Runs the same fetch and normalize pipeline as the dashboard without a browser,
which is handy to check the API or to dump a day to CSV.

Usage:
    python -m quakemap.cli.quake_report [--date 01/02/2024] [--api-base URL] [--csv out.csv]
"""

import argparse
import sys
from datetime import datetime, timezone
from typing import List, Optional

import pandas as pd

from quakemap.api.quake_client import fetch_day_checked, fetch_status
from quakemap.config import load_settings
from quakemap.core.normalize import records_to_dataframe
from quakemap.core.status_bar import describe
from quakemap.utils.date_util import to_api_format
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)


def build_report(
    date_value: Optional[str], api_base: str, timeout: float, style: str, tz: str
) -> tuple:
    """
    Fetch status and day data.

    :return: Tuple of (status_line, api_date, records_df, ok).
    """
    api_date = to_api_format(date_value) if date_value else to_api_format(datetime.now().date())
    status_line = describe(
        fetch_status(api_base, timeout), now=datetime.now(timezone.utc), tz=tz
    )
    records, ok = fetch_day_checked(api_date, api_base, timeout, style)
    return status_line, api_date, records_to_dataframe(records), ok


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings(use_secrets=False)

    parser = argparse.ArgumentParser(description="Earthquake status and daily event report")
    parser.add_argument("--date", type=str, help="Day to report (DD/MM/YYYY or YYYY-MM-DD), default today")
    parser.add_argument("--api-base", type=str, default=settings.api_base, help="API base URL")
    parser.add_argument("--csv", type=str, help="Write the events to this CSV file")
    args = parser.parse_args(argv)

    status_line, api_date, df, ok = build_report(
        args.date,
        args.api_base.rstrip("/"),
        settings.timeout,
        settings.day_endpoint_style,
        settings.timezone,
    )

    print(status_line)
    if not ok:
        print(f"❌ Could not load events for {api_date}")
        return 1

    print(f"✅ {len(df)} events on {api_date}")
    if not df.empty:
        with pd.option_context("display.max_rows", None, "display.width", 160):
            print(df.drop(columns=["latitude", "longitude"]).to_string(index=False))

    if args.csv:
        df.to_csv(args.csv, index=False)
        logger.info(f"Events saved to: {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
