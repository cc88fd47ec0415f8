"""Block-framed journal reader and writer for export shard files.

A shard is a sequence of 32 KiB blocks. Each block holds physical chunks
framed as ``checksum(4) length(2) type(1) payload``, all little-endian.
A logical record is either one FULL chunk or a FIRST chunk, any number of
MIDDLE chunks and a LAST chunk, possibly spanning blocks. A block tail
shorter than a chunk header is zero padding.
"""

import io
import logging
import struct
from typing import BinaryIO, Iterable, Iterator, List, Optional, Tuple

import google_crc32c

from .types import ChunkType, FramingError

BLOCK_SIZE = 32 * 1024
HEADER_SIZE = 7

_HEADER = struct.Struct("<IHB")
_MASK_DELTA = 0xA282EAD8


def masked_crc(data: bytes) -> int:
    """Return the masked CRC-32C stored in chunk headers."""
    crc = google_crc32c.value(bytes(data))
    return (((crc >> 15) | (crc << 17)) + _MASK_DELTA) & 0xFFFFFFFF


class JournalReader:
    """
    Lazy reader recovering logical records from a block-framed stream.

    In strict mode every corruption raises FramingError. Otherwise the
    corrupt block (or orphan chunk) is dropped with a warning, together with
    any partially assembled record, and reading resumes at the next chunk
    that can start a record.
    """

    def __init__(self, stream: BinaryIO, strict: bool = True,
                 verify_checksums: bool = True, source: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the journal reader.

        Args:
            stream: Readable binary stream positioned at a block boundary
            strict: Raise on corruption instead of resynchronising
            verify_checksums: Check the CRC of every chunk
            source: Name of the shard, used in error messages
            logger: Optional logger instance
        """
        self.stream = stream
        self.strict = strict
        self.verify_checksums = verify_checksums
        self.source = source or "<stream>"
        self.logger = logger or logging.getLogger(__name__)
        self.records_read = 0
        self.bytes_read = 0
        self.dropped_bytes = 0

    def __iter__(self) -> Iterator[bytes]:
        return self.records()

    def records(self) -> Iterator[bytes]:
        """
        Yield logical records in stream order.

        Yields:
            The payload of each reassembled record

        Raises:
            FramingError: On corruption when the reader is strict
        """
        fragments: Optional[List[bytes]] = None

        for block_offset, block in self._blocks():
            pos = 0
            while len(block) - pos >= HEADER_SIZE:
                offset = block_offset + pos
                checksum, length, chunk_type = _HEADER.unpack_from(block, pos)

                if checksum == 0 and length == 0 and chunk_type == 0:
                    self._corrupt("zero header", offset, len(block) - pos)
                    fragments = None
                    break

                if chunk_type < ChunkType.FULL or chunk_type > ChunkType.LAST:
                    self._corrupt(f"invalid chunk type {chunk_type:#x}", offset, len(block) - pos)
                    fragments = None
                    break

                start = pos + HEADER_SIZE
                end = start + length
                if end > len(block):
                    self._corrupt("chunk length overflows block", offset, len(block) - pos)
                    fragments = None
                    break

                # The checksum covers the type byte and the payload.
                if self.verify_checksums and checksum != masked_crc(block[start - 1:end]):
                    self._corrupt("checksum mismatch", offset, len(block) - pos)
                    fragments = None
                    break

                payload = block[start:end]
                pos = end

                if chunk_type == ChunkType.FULL:
                    if fragments is not None:
                        self._corrupt("record interrupted by a full chunk", offset,
                                      sum(len(f) for f in fragments))
                        fragments = None
                    yield self._emit(payload)

                elif chunk_type == ChunkType.FIRST:
                    if fragments is not None:
                        self._corrupt("record interrupted by a first chunk", offset,
                                      sum(len(f) for f in fragments))
                    fragments = [payload]

                elif fragments is None:
                    self._corrupt(f"orphan {ChunkType(chunk_type).name.lower()} chunk",
                                  offset, HEADER_SIZE + length)

                elif chunk_type == ChunkType.MIDDLE:
                    fragments.append(payload)

                else:
                    fragments.append(payload)
                    record = b"".join(fragments)
                    fragments = None
                    yield self._emit(record)

        if fragments is not None:
            self._corrupt("missing chunk part at end of stream", self.bytes_read,
                          sum(len(f) for f in fragments))

    def _emit(self, record: bytes) -> bytes:
        self.records_read += 1
        return record

    def _blocks(self) -> Iterator[Tuple[int, bytes]]:
        """Yield (offset, block) pairs; a short block ends the stream."""
        offset = 0
        while True:
            block = self._read_block()
            if not block:
                return
            self.bytes_read += len(block)
            yield offset, block
            if len(block) < BLOCK_SIZE:
                return
            offset += len(block)

    def _read_block(self) -> bytes:
        buffer = bytearray()
        while len(buffer) < BLOCK_SIZE:
            data = self.stream.read(BLOCK_SIZE - len(buffer))
            if not data:
                break
            buffer.extend(data)
        return bytes(buffer)

    def _corrupt(self, reason: str, offset: int, size: int) -> None:
        context = {"source": self.source, "offset": offset, "size": size}
        if self.strict:
            raise FramingError(f"{self.source}: {reason} at offset {offset}", context=context)

        self.dropped_bytes += size
        self.logger.warning(f"{self.source}: {reason} at offset {offset}, dropping {size} bytes")


class JournalWriter:
    """
    Writer framing logical records into the block layout read by JournalReader.
    """

    def __init__(self, stream: BinaryIO):
        """
        Initialize the journal writer.

        Args:
            stream: Writable binary stream
        """
        self.stream = stream
        self._block_offset = 0

    def write(self, record: bytes) -> None:
        """
        Append one logical record, splitting it across blocks as needed.

        Args:
            record: Record payload
        """
        data = memoryview(bytes(record))
        begin = True

        while True:
            leftover = BLOCK_SIZE - self._block_offset
            if leftover < HEADER_SIZE:
                if leftover > 0:
                    self.stream.write(b"\x00" * leftover)
                self._block_offset = 0

            available = BLOCK_SIZE - self._block_offset - HEADER_SIZE
            fragment = data[:available]
            data = data[available:]
            end = len(data) == 0

            if begin and end:
                chunk_type = ChunkType.FULL
            elif begin:
                chunk_type = ChunkType.FIRST
            elif end:
                chunk_type = ChunkType.LAST
            else:
                chunk_type = ChunkType.MIDDLE

            self._write_chunk(chunk_type, bytes(fragment))
            begin = False
            if end:
                return

    def _write_chunk(self, chunk_type: ChunkType, payload: bytes) -> None:
        typed = bytes([chunk_type]) + payload
        header = _HEADER.pack(masked_crc(typed), len(payload), chunk_type)
        self.stream.write(header)
        self.stream.write(payload)
        self._block_offset += HEADER_SIZE + len(payload)


def frame_records(records: Iterable[bytes]) -> bytes:
    """Frame records into a complete shard image."""
    buffer = io.BytesIO()
    writer = JournalWriter(buffer)
    for record in records:
        writer.write(record)
    return buffer.getvalue()
