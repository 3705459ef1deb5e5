"""
Build the demand snapshot document from a folder of CSV files.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from app.config import get_demand_settings
from app.services.csv_ingestion_service import CSVIngestionService, CSVSourceError
from demand.document import write_snapshot


def main(argv: list[str] | None = None) -> int:
    settings = get_demand_settings()

    parser = argparse.ArgumentParser(description="Aggregate crop demand CSV files into a snapshot.")
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(settings.data_dir) if settings.data_dir else "data",
        help="Folder containing the source CSV files.",
    )
    parser.add_argument(
        "--output",
        dest="output",
        default=str(settings.snapshot_path),
        help="Path of the snapshot JSON document to write.",
    )
    parser.add_argument(
        "--workers",
        dest="workers",
        type=int,
        default=settings.ingest_max_workers,
        help="Number of files read in parallel.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = CSVIngestionService(
        max_workers=args.workers,
        max_logged_rejections=settings.max_logged_rejections,
    )
    try:
        snapshot, summary = service.build_snapshot(args.data_dir)
    except CSVSourceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output = write_snapshot(snapshot, args.output)
    payload = {"output": str(output), **summary.to_dict()}
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
