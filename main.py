"""
Travel Desk Sale Submission Entry Point.

Bootstraps the dependency graph via constructor injection, loads a wizard
draft from a JSON file and submits its services to a sale.  The
submission report is printed as JSON.

Usage::

    python main.py SALE_ID DRAFT_JSON

The draft is either a list of camelCase line items or an object
``{"saleCurrency": "USD", "services": [...]}``.
"""

from __future__ import annotations

import argparse
import json
import sys
import traceback
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from travel_desk.config import get_config
from travel_desk.logger import StructuredLogger, get_logger
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.services import create_services
from travel_desk.utils.general import convert_to_json_safe
from travel_desk.utils.string_helpers import denormalize_keys


def load_draft(path: Path) -> list[ServiceLineItem]:
    """Read the line items of a saved wizard draft.

    Raises:
        ValueError: The file is not valid JSON or has no services.
        pydantic.ValidationError: A line item is malformed.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    records = data.get("services") if isinstance(data, dict) else data
    if not isinstance(records, list) or not records:
        raise ValueError(f"Draft '{path}' contains no services")
    return [ServiceLineItem.from_api(record) for record in records]


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit a sale wizard draft to the backend.")
    parser.add_argument("sale_id", help="Id of the sale the services are added to")
    parser.add_argument("draft", type=Path, help="Path to the draft JSON file")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point: wire dependencies and run one submission."""
    args = _parse_args(argv)
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting sale submission for %s", args.sale_id)

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Draft
    # ------------------------------------------------------------------
    try:
        line_items = load_draft(args.draft)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Could not load draft '%s': %s", args.draft, exc)
        sys.stderr.write(f"Invalid draft: {exc}\n")
        return 2

    # ------------------------------------------------------------------
    # 3. Service Container (single composition root)
    # ------------------------------------------------------------------
    services = create_services(config)

    try:
        result = services["sale_submission_service"].submit(args.sale_id, line_items)
    finally:
        services["api_client"].close()

    output = {
        "success": result.success,
        "status_code": result.status_code,
        "error": result.error,
        "report": convert_to_json_safe(result.data),
    }
    sys.stdout.write(json.dumps(denormalize_keys(output), indent=2) + "\n")
    return 0 if result.success else 1


def _show_fatal_error(exc: BaseException) -> None:
    """Write the traceback to stderr so the failure is not swallowed."""
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
