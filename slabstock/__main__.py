"""
CLI entry point for Slabstock.

Usage:
    python -m slabstock seed
    python -m slabstock list --status missing
    python -m slabstock scan photo.jpg --confirm
    python -m slabstock confirm 00925/6217 --status used
    python -m slabstock add 01001/7000 --material "Calacatta Gold"
    python -m slabstock import new_slabs.csv --yes
    python -m slabstock export -o slabs-updated.csv
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import database_url, settings
from .errors import SlabStockError
from .ocr import StaticOCREngine, TesseractEngine
from .report import STATUS_FILTERS, SlabFilter, format_console, format_scan
from .service import ReconciliationService
from .store import SlabStore

logger = logging.getLogger("slabstock")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slabstock",
        description="Slab stock check - reconcile physical slabs against the catalogue",
    )
    parser.add_argument(
        "--db",
        default=settings.DB_PATH,
        metavar="FILE",
        help=f"SQLite database file (default: {settings.DB_PATH})",
    )
    parser.add_argument(
        "--baseline",
        default=settings.BASELINE_CSV,
        metavar="FILE",
        help="Baseline CSV used to seed an empty database",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("seed", help="Load the baseline CSV if the database is empty")

    p = sub.add_parser("import", help="Replace all slabs with the rows of a CSV")
    p.add_argument("file", metavar="FILE")
    p.add_argument("--yes", action="store_true", help="Confirm replacing existing slabs")

    p = sub.add_parser("export", help="Export all slabs to CSV")
    p.add_argument("--output", "-o", metavar="FILE", help="Output file (default: stdout)")

    p = sub.add_parser("list", help="List slabs with counters")
    p.add_argument("--batch", default="")
    p.add_argument("--slab", default="")
    p.add_argument("--material", default="")
    p.add_argument("--status", choices=STATUS_FILTERS)

    p = sub.add_parser("scan", help="OCR an image and look up the slab")
    p.add_argument("image", nargs="?", metavar="IMAGE")
    p.add_argument("--text", help="Use this text instead of running OCR on an image")
    p.add_argument("--confirm", action="store_true", help="Mark the matched slab as seen")
    p.add_argument("--status", choices=("available", "used"))

    p = sub.add_parser("confirm", help="Mark an existing slab as seen")
    p.add_argument("combined_id")
    p.add_argument("--status", choices=("available", "used"))
    p.add_argument("--raw-text", default=None)
    p.add_argument("--confidence", type=float, default=None)

    p = sub.add_parser("add", help="Add a slab that is not in the catalogue")
    p.add_argument("combined_id")
    p.add_argument("--slab", default="")
    p.add_argument("--batch", default="")
    p.add_argument("--material", default="")
    p.add_argument("--dimensions", default="")
    p.add_argument("--thickness", default="")
    p.add_argument("--status", choices=("available", "used"), default="available")

    p = sub.add_parser("toggle", help="Flip a slab between available and used")
    p.add_argument("combined_id")

    p = sub.add_parser("clear", help="Remove all slabs from the database")
    p.add_argument("--yes", action="store_true", help="Confirm clearing")

    sub.add_parser("materials", help="List known materials")

    return parser


async def run(args: argparse.Namespace) -> int:
    store = await SlabStore.open(database_url(args.db))
    try:
        ocr = StaticOCREngine(args.text, confidence=100) if getattr(args, "text", None) else None
        service = ReconciliationService(store, ocr=ocr)
        await service.ensure_baseline(args.baseline)
        return await dispatch(service, args)
    finally:
        await store.close()


async def dispatch(service: ReconciliationService, args: argparse.Namespace) -> int:
    command = args.command

    if command == "seed":
        summary = await service.summary()
        print(f"{summary['total']} slab(s) in database")

    elif command == "import":
        path = Path(args.file)
        if not path.exists():
            print(f"Error: CSV file not found: {path}", file=sys.stderr)
            return 1
        if not args.yes:
            print("Error: import replaces every slab on this device; re-run with --yes", file=sys.stderr)
            return 1
        count = await service.import_csv(path.read_text(encoding="utf-8-sig"))
        print(f"Imported {count} slab(s)")

    elif command == "export":
        content = await service.export_csv()
        if args.output:
            with open(args.output, "w", newline="", encoding="utf-8") as f:
                f.write(content)
            print(f"CSV exported to: {args.output}")
        else:
            sys.stdout.write(content)

    elif command == "list":
        slab_filter = SlabFilter(
            batch=args.batch, slab=args.slab, material=args.material, status=args.status
        )
        rows = await service.list_slabs(slab_filter)
        print(format_console(rows, await service.summary()))

    elif command == "scan":
        if service.ocr is None:
            if not args.image:
                print("Error: give an IMAGE or --text", file=sys.stderr)
                return 1
            service.ocr = TesseractEngine()
        outcome = await service.scan(args.image)
        prefill = outcome.prefill()
        print(format_scan(prefill, outcome.matched))
        if args.confirm:
            if not outcome.matched:
                print("Error: nothing to confirm; use 'add' for a new slab", file=sys.stderr)
                return 1
            record = await service.confirm_scan({
                "combined_id": prefill["combined_id"],
                "status": args.status,
                "raw_ocr_text": outcome.text,
                "ocr_confidence": outcome.confidence,
            })
            print(f"Confirmed {record.combined_id} ({record.status.value})")

    elif command == "confirm":
        record = await service.confirm_scan({
            "combined_id": args.combined_id,
            "status": args.status,
            "raw_ocr_text": args.raw_text,
            "ocr_confidence": args.confidence,
        })
        print(f"Confirmed {record.combined_id} ({record.status.value})")

    elif command == "add":
        record = await service.create_manual({
            "combined_id": args.combined_id,
            "slab_number": args.slab,
            "batch_number": args.batch,
            "material": args.material,
            "dimensions": args.dimensions,
            "thickness_mm": args.thickness,
            "status": args.status,
        })
        print(f"Added {record.combined_id}")

    elif command == "toggle":
        record = await service.toggle_status(args.combined_id)
        print(f"{record.combined_id} is now {record.status.value}")

    elif command == "clear":
        if not args.yes:
            print("Error: clearing removes every slab on this device; re-run with --yes", file=sys.stderr)
            return 1
        await service.clear_all()
        print("All slabs cleared")

    elif command == "materials":
        for name in await service.material_suggestions():
            print(name)

    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        code = asyncio.run(run(args))
    except SlabStockError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
