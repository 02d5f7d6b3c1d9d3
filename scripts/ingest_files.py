#!/usr/bin/env python3
"""
Ingest local files through the same pipeline the API uses and print the combined plaintext.
Uses Gemini OCR when GEMINI_API_KEY is set (.env or env), mock OCR otherwise.
Run: python scripts/ingest_files.py scan.pdf notes.docx photo.jpg
"""
import asyncio
import mimetypes
import sys
from pathlib import Path


async def _run(paths: list[Path]) -> int:
    from docintake.jobs.ingestion import IngestionSession, SubmittedFile

    session = IngestionSession()

    def on_change(files):
        for f in files:
            if f.status.value == "processing" and f.ocr_progress:
                print(f"  {f.name}: OCR {f.ocr_progress}%")

    session.subscribe(on_change)
    batch = [
        SubmittedFile(name=p.name, data=p.read_bytes(), declared_type=mimetypes.guess_type(p.name)[0] or "")
        for p in paths
    ]
    await session.submit(batch)
    await session.wait_idle()
    await session.close()

    failed = 0
    for f in session.snapshot():
        print(f"{f.name}: {f.status.value} ({len(f.content)} chars){' ' + f.error if f.error else ''}")
        failed += f.status.value == "error"
    print()
    print(session.combined_content())
    return 1 if failed else 0


def main():
    paths = [Path(a) for a in sys.argv[1:]]
    if not paths:
        print(__doc__)
        return 2
    missing = [p for p in paths if not p.is_file()]
    if missing:
        print("Not found:", ", ".join(str(p) for p in missing))
        return 2
    return asyncio.run(_run(paths))


if __name__ == "__main__":
    sys.exit(main())
