"""
Canonical binary encoding of event payloads.

The encoded bytes are hashed (event storage key), signed and verified,
so encoding a given payload must be byte-identical everywhere.

Payload layout (big-endian):

    type           : u8      0 = CREATE_FILE, 1 = DELETE_FILE
    filename_len   : u32
    filename       : UTF-8
    content_hash   : 64 bytes, ASCII lowercase hex (all '0' for deletes)
    key_len        : u32
    encrypted_key  : key_len bytes (may be empty)
    CREATE_FILE:
      size         : u64
      created_at   : u64     epoch milliseconds
      has_mime     : u8      0 or 1
      mime_len     : u32     only if has_mime
      mime_type    : UTF-8   only if has_mime
    DELETE_FILE:
      deleted_at   : u64     epoch milliseconds

Signed-event envelope (the contents of an event file):

    magic          : 4 bytes b"NBEV"
    version        : u8      1
    payload_len    : u32
    payload        : payload_len bytes (layout above)
    signature_len  : u16
    signature      : DER ECDSA signature

Decoding never coerces: truncation, unknown discriminants, overrunning
lengths, bad UTF-8 and trailing bytes all raise DecodeError.
"""

from __future__ import annotations

import struct

from ..exceptions import DecodeError, ValidationError
from ..id_utils import EMPTY_HASH, HASH_HEX_LENGTH, is_hash
from .types import CreateFile, DeleteFile, EventPayload, EventType, SignedEvent

U64_MAX = 2**64 - 1
U32_MAX = 2**32 - 1
U16_MAX = 2**16 - 1

ENVELOPE_MAGIC = b"NBEV"
ENVELOPE_VERSION = 1


def _check_uint(name: str, value: object, maximum: int = U64_MAX) -> int:
    # bool is an int subclass; reject it along with floats and negatives.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(name, "must be an integer", repr(value))
    if value < 0 or value > maximum:
        raise ValidationError(name, f"must be between 0 and {maximum}", str(value))
    return value


def _utf8(name: str, value: object) -> bytes:
    if not isinstance(value, str):
        raise ValidationError(name, "must be a string", repr(value))
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError(name, f"not encodable as UTF-8: {e.reason}") from e
    _check_uint(f"{name} length", len(data), U32_MAX)
    return data


def encode_payload(payload: EventPayload) -> bytes:
    """Encode a payload to its canonical bytes."""
    if isinstance(payload, CreateFile):
        content_hash = payload.block_hash
        if not is_hash(content_hash):
            raise ValidationError("block_hash", "must be a 64-character lowercase hex string")
    elif isinstance(payload, DeleteFile):
        content_hash = EMPTY_HASH
    else:
        raise ValidationError("payload", f"unsupported payload type {type(payload).__name__}")

    filename = _utf8("filename", payload.filename)
    encrypted_key = bytes(payload.encrypted_key)
    _check_uint("encrypted_key length", len(encrypted_key), U32_MAX)

    parts = [
        struct.pack(">BI", payload.event_type.value, len(filename)),
        filename,
        content_hash.encode("ascii"),
        struct.pack(">I", len(encrypted_key)),
        encrypted_key,
    ]

    if isinstance(payload, CreateFile):
        parts.append(
            struct.pack(
                ">QQ",
                _check_uint("size", payload.size),
                _check_uint("created_at", payload.created_at),
            )
        )
        if payload.mime_type is None:
            parts.append(struct.pack(">B", 0))
        else:
            mime = _utf8("mime_type", payload.mime_type)
            parts.append(struct.pack(">BI", 1, len(mime)))
            parts.append(mime)
    else:
        parts.append(struct.pack(">Q", _check_uint("deleted_at", payload.deleted_at)))

    return b"".join(parts)


class _Reader:
    """Bounds-checked cursor over a byte buffer."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def take(self, length: int, what: str) -> bytes:
        end = self.offset + length
        if end > len(self.data):
            raise DecodeError(
                f"truncated {what}: need {length} bytes, {len(self.data) - self.offset} left",
                self.offset,
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: str, what: str) -> tuple:
        return struct.unpack(fmt, self.take(struct.calcsize(fmt), what))

    def text(self, length: int, what: str) -> str:
        start = self.offset
        raw = self.take(length, what)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"{what} is not valid UTF-8", start) from e

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise DecodeError(f"{len(self.data) - self.offset} trailing bytes", self.offset)


def decode_payload(data: bytes) -> EventPayload:
    """Decode canonical payload bytes, raising DecodeError on any malformation."""
    reader = _Reader(data)
    (type_byte,) = reader.unpack(">B", "event type")
    try:
        event_type = EventType(type_byte)
    except ValueError:
        raise DecodeError(f"unknown event type {type_byte}", 0) from None

    (name_len,) = reader.unpack(">I", "filename length")
    filename = reader.text(name_len, "filename")

    hash_offset = reader.offset
    try:
        content_hash = reader.take(HASH_HEX_LENGTH, "content hash").decode("ascii")
    except UnicodeDecodeError as e:
        raise DecodeError("content hash is not ASCII", hash_offset) from e
    if not is_hash(content_hash):
        raise DecodeError("content hash is not lowercase hex", hash_offset)

    (key_len,) = reader.unpack(">I", "encrypted key length")
    encrypted_key = reader.take(key_len, "encrypted key")

    if event_type is EventType.CREATE_FILE:
        size, created_at = reader.unpack(">QQ", "size/created_at")
        (has_mime,) = reader.unpack(">B", "mime flag")
        if has_mime == 0:
            mime_type = None
        elif has_mime == 1:
            (mime_len,) = reader.unpack(">I", "mime length")
            mime_type = reader.text(mime_len, "mime type")
        else:
            raise DecodeError(f"invalid mime flag {has_mime}", reader.offset - 1)
        reader.finish()
        return CreateFile(
            filename=filename,
            block_hash=content_hash,
            size=size,
            created_at=created_at,
            mime_type=mime_type,
            encrypted_key=encrypted_key,
        )

    if content_hash != EMPTY_HASH:
        raise DecodeError("delete event carries a content hash", hash_offset)
    (deleted_at,) = reader.unpack(">Q", "deleted_at")
    reader.finish()
    return DeleteFile(filename=filename, deleted_at=deleted_at, encrypted_key=encrypted_key)


def encode_signed_event(event: SignedEvent) -> bytes:
    """Encode a signed event into the on-disk envelope."""
    payload = encode_payload(event.payload)
    signature = bytes(event.signature)
    _check_uint("signature length", len(signature), U16_MAX)
    return b"".join(
        [
            ENVELOPE_MAGIC,
            struct.pack(">BI", ENVELOPE_VERSION, len(payload)),
            payload,
            struct.pack(">H", len(signature)),
            signature,
        ]
    )


def decode_signed_event(data: bytes) -> tuple[SignedEvent, bytes]:
    """Decode an event envelope.

    Returns:
        Tuple of (signed_event, payload_bytes). The payload bytes are
        returned exactly as stored so callers can hash and verify them.
    """
    reader = _Reader(data)
    if reader.take(len(ENVELOPE_MAGIC), "magic") != ENVELOPE_MAGIC:
        raise DecodeError("bad envelope magic", 0)
    version, payload_len = reader.unpack(">BI", "envelope header")
    if version != ENVELOPE_VERSION:
        raise DecodeError(f"unsupported envelope version {version}", len(ENVELOPE_MAGIC))
    payload_bytes = reader.take(payload_len, "payload")
    (sig_len,) = reader.unpack(">H", "signature length")
    signature = reader.take(sig_len, "signature")
    reader.finish()

    payload = decode_payload(payload_bytes)
    return SignedEvent(payload=payload, signature=signature), payload_bytes
