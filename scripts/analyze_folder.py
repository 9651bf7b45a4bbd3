#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _add_sys_path() -> None:
    root = _project_root()
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_add_sys_path()

from image_analyzer.core.errors import ImageAnalyzerError
from image_analyzer.core.export import export_csv
from image_analyzer.core.intake import ACCEPTED_TYPES, SourceFile, intake_files
from image_analyzer.core.logging_setup import configure_logging
from image_analyzer.core.session_config import MODEL_LABELS, SessionConfig
from image_analyzer.core.settings import SettingsError, load_settings
from image_analyzer.core.store import ImageStore
from image_analyzer.core.workflow import AnalysisWorkflow, MockAnalyzer


def find_images(folder: Path, recursive: bool = False) -> List[Path]:
    exts = {f".{ext}" for ext in ACCEPTED_TYPES}
    it = folder.rglob("*") if recursive else folder.glob("*")
    return sorted(p for p in it if p.is_file() and p.suffix.lower() in exts)


def load_source_files(paths: List[Path]) -> List[SourceFile]:
    files: List[SourceFile] = []
    for p in paths:
        mime, _ = mimetypes.guess_type(p.name)
        files.append(SourceFile(name=p.name, data=p.read_bytes(), type=mime or ""))
    return files


def _progress_line(value: float, done: int, total: int) -> None:
    print(f"\r{round(value):3d}% complete ({done}/{total})", end="", file=sys.stderr, flush=True)


def run(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Analyze a folder of images and write the results CSV")
    p.add_argument("folder", help="Folder containing images")
    p.add_argument("--api-key", default="", help="Provider API key")
    p.add_argument("--model", choices=sorted(MODEL_LABELS), default=None)
    p.add_argument("--describe", action="store_true", help="Include the description column")
    p.add_argument("--filename-context", action="store_true", help="Use file names as context")
    p.add_argument("--delay", type=float, default=None, help="Simulated seconds per image")
    p.add_argument("--recursive", action="store_true")
    p.add_argument("--out", default=None, help="Output CSV path")
    args = p.parse_args(argv)

    try:
        settings = load_settings().settings
    except SettingsError as exc:
        print(f"Settings error: {exc}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    folder = Path(args.folder).expanduser()
    if not folder.is_dir():
        print(f"Not a folder: {folder}", file=sys.stderr)
        return 2

    config = SessionConfig(
        api_key=args.api_key,
        model=args.model or settings.default_model,
        use_filename_context=args.filename_context,
        include_description=args.describe,
    )
    store = ImageStore()
    store.append(intake_files(load_source_files(find_images(folder, args.recursive)), store.previews))

    delay = settings.analysis_delay_s if args.delay is None else args.delay
    workflow = AnalysisWorkflow(MockAnalyzer(delay_s=delay))
    try:
        asyncio.run(workflow.run(config, store, on_progress=_progress_line))
    except ImageAnalyzerError as exc:
        store.close()
        print(exc.user_message, file=sys.stderr)
        return 2
    print(file=sys.stderr)

    artifact = export_csv(store.results, store.results_include_description)
    count = len(store.results)
    store.close()
    if artifact is None:
        return 0
    out = Path(args.out) if args.out else Path(artifact.filename)
    out.write_bytes(artifact.data)
    print(f"Wrote {count} result(s) to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(run())
