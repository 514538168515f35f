"""Export: write parsed Documents and a listing index as JSON for the site renderer"""

import json
from pathlib import Path
from typing import Iterable

from postpub.core.models import Document


def document_path(doc: Document, output_dir: Path) -> Path:
    """Output path mirrors the source directory: output_dir / parent(source) / slug.json"""
    return output_dir / Path(doc.source_path).parent / f"{doc.slug}.json"


def write_document(doc: Document, output_dir: Path) -> Path:
    """Write one Document as JSON and return the written path."""
    path = document_path(doc, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(doc.model_dump_json(indent=2), encoding='utf-8')
    return path


def build_index(documents: Iterable[Document]) -> list[dict]:
    """Summaries of all documents, newest first (ties keep slug order)."""
    entries = [
        {
            "slug": doc.slug,
            "title": doc.metadata.title,
            "date": doc.metadata.date.isoformat(),
            "tags": list(doc.metadata.tags),
            "source_path": doc.source_path,
            "segment": doc.segment,
            "anchors": doc.anchors,
        }
        for doc in sorted(documents, key=lambda d: d.slug)
    ]
    return sorted(entries, key=lambda e: e["date"], reverse=True)


def write_index(documents: Iterable[Document], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / "index.json"
    path.write_text(json.dumps(build_index(documents), indent=2, ensure_ascii=False), encoding='utf-8')
    return path
