#!/usr/bin/env python3
"""
Report stored objects and records that do not match up.

An ingestion run that fails after uploading leaves its objects in the store
without a record. This script lists those video IDs, plus records whose video
object is gone. It never deletes anything.

Usage:
    python scripts/find_orphans.py [--limit N] [--config-dir DIR] [--env ENV]

Options:
    --limit       Maximum objects to scan per prefix (default 100000)
    --config-dir  Settings directory (default: config)
    --env         Settings environment (default: dev)
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass, field

from videotube.commons.settings import get_settings
from videotube.infrastructure.factory import InfrastructureFactory


@dataclass
class OrphanReport:
    """Mismatches between the object store and the record store."""

    objects_without_record: dict[str, list[str]] = field(default_factory=dict)
    records_without_video: list[str] = field(default_factory=list)


def video_id_from_key(key: str) -> str | None:
    """Video ID encoded in a ``videos/`` or ``thumbnails/`` key, if any."""
    if key.startswith("videos/") and key.endswith(".mp4"):
        return key[len("videos/") : -len(".mp4")] or None
    if key.startswith("thumbnails/"):
        parts = key.split("/")
        if len(parts) >= 3 and parts[1]:
            return parts[1]
    return None


def build_report(
    object_keys: list[str],
    record_ids: set[str],
) -> OrphanReport:
    """Group object keys by video ID and compare against known records."""
    report = OrphanReport()
    videos_with_object: set[str] = set()

    for key in object_keys:
        video_id = video_id_from_key(key)
        if video_id is None:
            continue
        if key.startswith("videos/"):
            videos_with_object.add(video_id)
        if video_id not in record_ids:
            report.objects_without_record.setdefault(video_id, []).append(key)

    report.records_without_video = sorted(record_ids - videos_with_object)
    return report


async def find_orphans(factory: InfrastructureFactory, limit: int) -> OrphanReport:
    """Scan both stores and build the report."""
    blob = factory.get_blob_storage()
    document_db = factory.get_document_db()
    collection = factory.settings.document_db.collections.videos

    keys: list[str] = []
    for prefix in ("videos/", "thumbnails/"):
        blobs = await blob.list_blobs(prefix=prefix, max_results=limit)
        keys.extend(b.path for b in blobs)

    documents = await document_db.find(collection, {}, limit=0)
    record_ids = {doc["video_id"] for doc in documents if "video_id" in doc}

    return build_report(keys, record_ids)


def print_report(report: OrphanReport) -> None:
    print("\n=== Objects without a record ===")
    if not report.objects_without_record:
        print("  none")
    for video_id, keys in sorted(report.objects_without_record.items()):
        print(f"  {video_id}: {len(keys)} object(s)")
        for key in sorted(keys):
            print(f"    - {key}")

    print("\n=== Records without a video object ===")
    if not report.records_without_video:
        print("  none")
    for video_id in report.records_without_video:
        print(f"  {video_id}")


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Report objects and records that do not match up"
    )
    parser.add_argument("--limit", type=int, default=100000)
    parser.add_argument("--config-dir", default=None)
    parser.add_argument("--env", default=None)
    args = parser.parse_args()

    settings = get_settings(args.config_dir, args.env)
    factory = InfrastructureFactory(settings)
    try:
        report = await find_orphans(factory, args.limit)
    finally:
        await factory.close_all()

    print_report(report)


if __name__ == "__main__":
    asyncio.run(main())
