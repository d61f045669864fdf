"""Probe the Report Center from the command line.

    python -m scripts.report_center templates ORG_ID
    python -m scripts.report_center campaign ORG_ID CAMPAIGN_ID [--start YYYY-MM-DD] [--end YYYY-MM-DD]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import defaultdict

from dotenv import load_dotenv

from adreports.config import ReportCenterSettings
from adreports.reportcenter.errors import ReportCenterError
from adreports.reportcenter.models import ReportOptions
from adreports.reportcenter.service import ReportCenterService
from adreports.utils.dates import default_date_range


async def show_templates(service: ReportCenterService, organization_id: str) -> None:
    templates = await service.list_templates(organization_id)
    by_category: dict[str, list[dict]] = defaultdict(list)
    for template in templates:
        by_category[template.get("category") or "Other"].append(template)
    for category in sorted(by_category):
        print(category)
        for template in by_category[category]:
            print(f"  [{template.get('template_id')}] {template.get('title')}")


async def show_campaign(service: ReportCenterService, args: argparse.Namespace) -> None:
    default_start, default_end = default_date_range()
    options = ReportOptions(include_keywords=args.keywords)
    report = await service.get_enhanced_campaign_data(
        args.organization_id, args.campaign_id, args.start or default_start, args.end or default_end, options
    )
    print(json.dumps(report.to_dict(), indent=2, default=str))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    commands = parser.add_subparsers(dest="command", required=True)
    templates = commands.add_parser("templates", help="list report templates available to an organization")
    templates.add_argument("organization_id")
    campaign = commands.add_parser("campaign", help="fetch enhanced campaign data")
    campaign.add_argument("organization_id")
    campaign.add_argument("campaign_id")
    campaign.add_argument("--start")
    campaign.add_argument("--end")
    campaign.add_argument("--keywords", action="store_true", help="include keyword performance")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    service = ReportCenterService.from_settings(ReportCenterSettings.from_env())
    try:
        if args.command == "templates":
            await show_templates(service, args.organization_id)
        else:
            await show_campaign(service, args)
    finally:
        await service.close()


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except (RuntimeError, ValueError, ReportCenterError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
