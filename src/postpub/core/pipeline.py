"""Pipeline step functions: per-file processing, parallel parse, and build orchestration"""

import logging
from concurrent.futures import ProcessPoolExecutor
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Mapping

from sqlmodel import Session

from postpub.core.blocks import iter_blocks
from postpub.core.errors import PostpubError
from postpub.core.export import write_document
from postpub.core.models import CodeFence, DocumentError, FileResult, RawFile
from postpub.core.parse import assign_slugs, make_raw_file, parse_segment
from postpub.core.split import SENTINEL, iter_segments
from postpub.crud.records import commit_record, prune_records


logger = logging.getLogger(__name__)


def process_file(raw: RawFile, sentinel: str = SENTINEL, strict_fences: bool = False) -> FileResult:
    """Parse every segment of a file, isolating failures per segment."""
    segments = list(iter_segments(raw.text, sentinel))
    logger.debug("%s: %d segment(s)", raw.path, len(segments))

    documents, errors = [], []
    for segment in segments:
        try:
            doc = parse_segment(segment, raw.path, strict_fences=strict_fences)
        except PostpubError as e:
            e.with_location(raw.path, segment.index)
            logger.warning("Skipping document: %s", e)
            errors.append(DocumentError(path=raw.path, segment=segment.index, kind=e.kind, message=e.message))
            continue
        for block in iter_blocks(doc.blocks):
            if isinstance(block, CodeFence) and not block.closed:
                logger.warning("%s: segment %d: unterminated code fence kept to end of body", raw.path, segment.index)
        documents.append(doc)

    return FileResult(
        path=raw.path,
        documents=assign_slugs(raw, documents, multi=len(segments) > 1),
        errors=errors,
    )


def run_parse(
    sources: Mapping[str, str],
    sentinel: str = SENTINEL,
    strict_fences: bool = False,
    workers: int = 1,
    ) -> list[FileResult]:
    """Process a path -> text mapping. Files are independent; results keep input order."""
    raws = [make_raw_file(path, text) for path, text in sources.items()]
    work = partial(process_file, sentinel=sentinel, strict_fences=strict_fences)
    if workers <= 1 or len(raws) <= 1:
        return [work(raw) for raw in raws]
    with ProcessPoolExecutor(max_workers=min(workers, len(raws))) as pool:
        return list(pool.map(work, raws))


def run_build(
    results: list[FileResult],
    engine,
    output_dir: Path,
    force: bool = False,
    ) -> tuple[dict[str, int], list[tuple[str, Path]]]:
    """Record parsed documents in the rebuild cache and export created/updated ones.

    Returns (counts, written) where written is a list of (slug, json_path).
    With force=True every document is exported regardless of cache status.
    """
    built_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    written = []
    with Session(engine) as session:
        for result in results:
            for doc in result.documents:
                status = commit_record(session, doc, built_at)
                counts[status] += 1
                if force or status != "unchanged":
                    written.append((doc.slug, write_document(doc, output_dir)))
            if result.ok:
                prune_records(session, result.path, [d.segment for d in result.documents])
        session.commit()
    return counts, written
