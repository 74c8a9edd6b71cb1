#!/usr/bin/env python3
"""
Batch Caption Parser
Parses every *.txt caption in a directory and writes a <name>.json recipe
next to it (or into --output).

Usage:
    python batch_parse.py captions/              # Parse all captions
    python batch_parse.py captions/ --dry-run    # Parse without writing files
"""

import argparse
import json
import sys
import traceback
from datetime import datetime
from pathlib import Path

from caption_parser.social_caption import parse_social_caption
from failure_logger import classify_error, cleanup_old_failure_logs, failures_dir_for, log_failures


def parse_caption_file(path: Path, output_dir: Path, dry_run: bool = False) -> dict:
    """Parse one caption file.

    Returns:
        dict with success, recipe, output_path and error keys
    """
    try:
        caption = path.read_text(encoding="utf-8")
        if not caption.strip():
            return {"success": False, "recipe": None, "output_path": None, "error": "Empty caption"}

        recipe = parse_social_caption(caption, fallback_title=path.stem.replace("_", " "), source="text")
        output_path = output_dir / f"{path.stem}.json"
        if not dry_run:
            output_path.write_text(json.dumps(recipe, indent=2, ensure_ascii=False), encoding="utf-8")
    except Exception as e:
        return {
            "success": False,
            "recipe": None,
            "output_path": None,
            "error": str(e),
            "_traceback": traceback.format_exc(),
            "_error_category": classify_error(str(e), type(e)),
        }

    return {"success": True, "recipe": recipe, "output_path": output_path, "error": None}


def run_batch(input_dir: Path, output_dir: Path = None, dry_run: bool = False, project_root: Path = None) -> dict:
    """Parse a directory of captions and log the problem files.

    Low-confidence parses are written like any other but also land in the
    failure log so the heuristics can be tuned against them.

    Returns:
        dict with succeeded, low_confidence, failed lists and failure_log path
    """
    input_dir = Path(input_dir)
    output_dir = Path(output_dir) if output_dir else input_dir
    if not dry_run:
        output_dir.mkdir(parents=True, exist_ok=True)

    files = sorted(input_dir.glob("*.txt"))
    succeeded = []
    low_confidence = []
    failed = []

    for i, path in enumerate(files, 1):
        print(f"[{i}/{len(files)}] {path.name}")
        result = parse_caption_file(path, output_dir, dry_run=dry_run)

        if result["success"]:
            recipe = result["recipe"]
            print(f"  -> Title: {recipe['title'] or '(untitled)'}")
            print(f"  -> {len(recipe['ingredients'])} ingredients, {len(recipe['steps'])} steps ({recipe['confidence']})")
            succeeded.append(path.name)
            if recipe["confidence"] == "low":
                low_confidence.append({
                    "file": path.name,
                    "error": "Low confidence parse",
                    "error_category": "empty",
                    "ingredients": len(recipe["ingredients"]),
                    "steps": len(recipe["steps"]),
                    "timestamp": datetime.now().isoformat(timespec="seconds"),
                })
        else:
            error = result["error"]
            print(f"  -> Error: {error}")
            failed.append({
                "file": path.name,
                "error": error,
                "error_category": result.get("_error_category", classify_error(error, Exception)),
                "traceback": result.get("_traceback", ""),
                "timestamp": datetime.now().isoformat(timespec="seconds"),
            })

    failure_log = None
    problems = failed + low_confidence
    if problems and not dry_run:
        failure_log = log_failures(problems, total_processed=len(files), project_root=project_root)

    return {
        "total": len(files),
        "succeeded": succeeded,
        "low_confidence": low_confidence,
        "failed": failed,
        "failure_log": failure_log,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Batch parse recipe captions from a directory of .txt files"
    )
    parser.add_argument(
        'input_dir',
        help='Directory holding caption .txt files'
    )
    parser.add_argument(
        '--output',
        help='Directory for .json results (defaults to input_dir)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Parse without writing results or failure logs'
    )
    args = parser.parse_args()

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        print(f"Error: {input_dir} is not a directory", file=sys.stderr)
        sys.exit(1)

    # Clean up old failure logs
    removed = cleanup_old_failure_logs(failures_dir_for(Path(__file__).parent))
    if removed:
        print(f"Cleaned up {removed} old failure log(s)")

    summary = run_batch(input_dir, output_dir=args.output, dry_run=args.dry_run,
                        project_root=Path(__file__).parent)

    # Summary
    print("\n" + "=" * 40)
    print("Summary")
    print("=" * 40)
    print(f"Processed: {summary['total']}")
    print(f"Succeeded: {len(summary['succeeded'])}")
    print(f"Low confidence: {len(summary['low_confidence'])}")
    print(f"Failed: {len(summary['failed'])}")

    if summary["failed"]:
        print("\nFailed files:")
        for f in summary["failed"]:
            print(f"  - {f['file']}")
            print(f"    ({f['error']}) [{f['error_category']}]")

    if summary["failure_log"]:
        print(f"\nFailure log written to: {summary['failure_log']}")


if __name__ == "__main__":
    main()
