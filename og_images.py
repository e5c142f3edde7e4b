#!/usr/bin/env python3
"""Render a meeting or attendance preview image to a file."""

import argparse
import logging
import os
import re
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from domain_types import MissingIdentifier, OutputFormat, RenderRequest, Variant
from og_render import RasterizationFailed
from og_web import build_service
from settings import Settings


def main(argv: Optional[List[str]] = None) -> int:
    """Render one preview image and write it next to the caller."""

    parser = argparse.ArgumentParser(
        description="Render the social preview image for a meeting or attendance."
    )
    parser.add_argument(
        "entity_id",
        help="Meeting id, or attendance hash with --type attendance.",
    )
    parser.add_argument(
        "--type",
        choices=[variant.value for variant in Variant],
        default=Variant.MEETING.value,
        help="Preview variant (default: meeting).",
    )
    parser.add_argument(
        "-f", "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.PNG.value,
        help="Output format (default: png).",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output file (default: og_<id>.<format>).",
    )
    parser.add_argument(
        "--api",
        default=os.getenv("MEETINGS_API_URL"),
        help=(
            "Meetings API base URL (defaults to MEETINGS_API_URL from the "
            "environment/.env)."
        ),
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = Settings.from_env()
    if args.api:
        settings = replace(settings, api_url=args.api)
    service = build_service(settings)

    try:
        request = RenderRequest.parse(args.entity_id, args.format, args.type)
    except MissingIdentifier as exc:
        parser.error(str(exc))
    try:
        status, body = service.render(request)
    except RasterizationFailed as exc:
        raise SystemExit(str(exc)) from exc

    safe_id = re.sub(r"[^A-Za-z0-9._-]", "_", request.entity_id)
    output = Path(args.output or f"og_{safe_id}.{request.output_format}")
    output.write_bytes(body)

    note = "" if status == 200 else f" (placeholder, upstream status {status})"
    print(f"Wrote {output} ({len(body)} bytes){note}")
    return 0 if status == 200 else 1


if __name__ == "__main__":

    load_dotenv()

    raise SystemExit(main())
