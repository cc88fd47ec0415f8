#!/usr/bin/env python3
"""
Example usage of the export reader.

This script writes a small export into a temporary directory laid out like
a bucket, then converts it to NDJSON in both output shapes.
"""

import io
import tempfile
from pathlib import Path
from export_reader import (
    ConverterConfig,
    DecodedEntity,
    EntityEncoder,
    ExportConverter,
    KeyPath,
    Property,
)
from export_reader.io import LocalObjectStore, OutputSink
from export_reader.journal import frame_records
from export_reader.types import Meaning

EXPORT_PREFIX = "exports/2024-01-01/all_namespaces/kind_Posts"


def build_shards(encoder: EntityEncoder):
    """Build two shards of sample posts."""
    users = {
        "alice": ["Hello", "Learning Python"],
        "bob": ["First post"],
    }

    shards = []
    for user, titles in users.items():
        records = []
        for index, title in enumerate(titles):
            author = DecodedEntity(key=None, properties=[
                Property.of("name", user.title()),
                Property.of("email", f"{user}@example.com"),
            ])
            post = DecodedEntity(
                key=KeyPath.from_pairs(("Users", user), ("Posts", index + 1)),
                properties=[
                    Property.of("title", title),
                    Property.of("tags", "intro", multiple=True),
                    Property.of("tags", "python", multiple=True),
                    Property.of("likes", 3 * index),
                    Property.of("published", True),
                    Property.of("created", 1_704_103_200_000_000 + index, meaning=Meaning.GD_WHEN),
                    encoder.encode_nested("author", author),
                ]
            )
            records.append(encoder.encode(post))
        shards.append(frame_records(records))
    return shards


def main():
    """Main example function."""
    print("Export Reader Example")
    print("=" * 50)

    encoder = EntityEncoder()

    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        export_dir = root / "my-bucket" / EXPORT_PREFIX
        export_dir.mkdir(parents=True)

        for index, shard in enumerate(build_shards(encoder)):
            (export_dir / f"output-{index}").write_bytes(shard)
            print(f"Wrote output-{index} ({len(shard)} bytes)")

        store = LocalObjectStore(root)
        for policy in ("export", "backup"):
            sink = OutputSink(io.BytesIO())
            converter = ExportConverter(store, ConverterConfig(workers=2, policy=policy), sink)
            report = converter.convert(f"my-bucket/{EXPORT_PREFIX}")

            if report.success:
                print(f"\n✅ {policy}: {report.total_records} records from {len(report.shards)} shards")
                for line in sink.stream.getvalue().decode("utf-8").splitlines():
                    print(f"   {line[:120]}")
            else:
                print(f"\n❌ {policy} conversion failed")
                for shard in report.failures:
                    print(f"   {shard.name}: {shard.error}")


if __name__ == "__main__":
    main()
