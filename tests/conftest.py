"""Pytest configuration and fixtures."""

import pytest
import tempfile
from pathlib import Path
from typing import List
from export_reader.entity import EntityEncoder
from export_reader.journal import frame_records
from export_reader.models import DecodedEntity, KeyPath, Property
from export_reader.types import Meaning

SHARD_PREFIX = "exports/2024-01-01/all_namespaces/kind_Posts"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def encoder():
    """Entity encoder for building records."""
    return EntityEncoder()


@pytest.fixture
def sample_entity(encoder):
    """A post with a multi-valued property, a timestamp and an embedded entity."""
    address = DecodedEntity(
        key=None,
        properties=[
            Property.of("city", "Berlin"),
            Property.of("zip", 10115),
        ]
    )
    return DecodedEntity(
        key=KeyPath.from_pairs(("Users", "alice"), ("Posts", "42")),
        properties=[
            Property.of("title", "Hello"),
            Property.of("tags", "a", multiple=True),
            Property.of("tags", "b", multiple=True),
            Property.of("published", True),
            Property.of("score", 4.5),
            Property.of("created", 1_700_000_000_000_000, meaning=Meaning.GD_WHEN),
            encoder.encode_nested("address", address),
        ]
    )


def build_post(shard: int, seq: int) -> DecodedEntity:
    """A small post entity tagged with its shard and position."""
    return DecodedEntity(
        key=KeyPath.from_pairs(("Users", f"user{shard}"), ("Posts", f"{shard}-{seq}")),
        properties=[
            Property.of("shard", shard),
            Property.of("seq", seq),
            Property.of("body", "x" * (seq * 37 % 500)),
        ]
    )


def write_object(root: Path, bucket: str, name: str, data: bytes) -> Path:
    """Write an object into a local bucket tree."""
    path = root / bucket / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def export_tree(temp_dir, encoder):
    """
    Local bucket with three shards of posts plus the export metadata file.

    Returns:
        Tuple of (root, source_path, records_per_shard)
    """
    records_per_shard: List[int] = [25, 40, 5]
    for shard, count in enumerate(records_per_shard):
        records = [encoder.encode(build_post(shard, seq)) for seq in range(count)]
        write_object(temp_dir, "bucket", f"{SHARD_PREFIX}/output-{shard}", frame_records(records))

    write_object(temp_dir, "bucket", f"{SHARD_PREFIX}/all_namespaces_kind_Posts.export_metadata",
                 b"not a shard")
    return temp_dir, f"bucket/{SHARD_PREFIX}", records_per_shard
