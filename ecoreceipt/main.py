import argparse
import json
import sys
from dataclasses import asdict
from decimal import Decimal
from enum import Enum
from pathlib import Path

from ecoreceipt.config.settings import Settings
from ecoreceipt.logging.logger import Log
from ecoreceipt.pipeline.models import ReceiptResult
from ecoreceipt.pipeline.processor import ReceiptProcessor, build_processor


def _json_default(value: object) -> object:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def result_to_dict(result: ReceiptResult) -> dict[str, object]:
    return asdict(result)


def process_paths(
    processor: ReceiptProcessor,
    paths: list[Path],
) -> tuple[list[dict[str, object]], int]:
    """Process every path independently; one bad receipt never stops the batch."""
    outputs: list[dict[str, object]] = []
    failures = 0
    for path in paths:
        try:
            result = processor.process(path.read_bytes(), receipt_id=path.name)
        except Exception as exc:
            failures += 1
            Log.error(f"Failed to process {path}: {exc}")
            outputs.append({"receipt_id": path.name, "error": str(exc) or type(exc).__name__})
            continue
        outputs.append(result_to_dict(result))
    return outputs, failures


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build the processor -> analyse each receipt."""
    parser = argparse.ArgumentParser(
        description="Extract products from receipt photos and score their environmental impact"
    )
    parser.add_argument("images", nargs="+", type=Path, help="Receipt image files")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    parser.add_argument("--output", type=Path, help="Write the JSON report here instead of stdout")
    args = parser.parse_args(argv)

    settings = Settings()
    # stdout carries the JSON report.
    Log.configure(settings.log_level, stream=sys.stderr)

    processor = build_processor(settings)
    outputs, failures = process_paths(processor, args.images)
    report = json.dumps(outputs, indent=args.indent, ensure_ascii=False, default=_json_default)
    if args.output is not None:
        args.output.write_text(report + "\n", encoding="utf-8")
    else:
        print(report)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
