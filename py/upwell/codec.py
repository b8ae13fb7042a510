"""Pack an Upwell into a single tar archive and back.

Archive layout:
    metadata.ledger     the metadata ledger
    <draftId>.draft     one entry per draft, root included exactly once;
                        undecoded archived drafts are written byte-for-byte
"""

import asyncio
import io
import logging
import tarfile
import time
from typing import Awaitable, Dict, List, Optional, Tuple

from upwell.config import UpwellConfig, DEFAULT_CONFIG
from upwell.draft import Draft, Hydrated, Raw, StoredDraft, encode
from upwell.errors import MalformedArchiveError, MalformedContentError
from upwell.metadata import UpwellMetadata
from upwell.types import Author
from upwell.upwell import Upwell

logger = logging.getLogger(__name__)


def _write_entry(pack: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name=name)
    info.size = len(data)
    pack.addfile(info, io.BytesIO(data))


def _draft_id(name: str, config: UpwellConfig) -> str:
    draft_id, ext, rest = name.rpartition(config.draft_ext)
    if not ext or rest or not draft_id or "/" in draft_id:
        raise MalformedArchiveError(f"unexpected archive entry {name!r}")
    return draft_id


def _encode(upwell: Upwell, config: UpwellConfig) -> List[Tuple[str, bytes]]:
    """Snapshot every stored draft and the ledger as archive entries."""
    entries = [(f"{stored.id}{config.draft_ext}", encode(stored)) for stored in upwell.stored()]
    entries.append((config.metadata_key, upwell.metadata.save()))
    return entries


def _pack(entries: List[Tuple[str, bytes]]) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as pack:
        for name, data in entries:
            _write_entry(pack, name, data)
    return buf.getvalue()


def serialize(upwell: Upwell, config: Optional[UpwellConfig] = None) -> bytes:
    start = time.time()
    data = _pack(_encode(upwell, config or DEFAULT_CONFIG))
    logger.debug("(serialize): execution time %dms", (time.time() - start) * 1000)
    return data


def _read_entries(data: bytes, config: UpwellConfig):
    metadata: Optional[bytes] = None
    drafts: Dict[str, bytes] = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as extract:
            for member in extract:
                if not member.isfile():
                    raise MalformedArchiveError(f"unexpected archive member {member.name!r}")
                payload = extract.extractfile(member).read()
                if len(payload) != member.size:
                    raise MalformedArchiveError(f"truncated archive entry {member.name!r}")
                if member.name == config.metadata_key:
                    if metadata is not None:
                        raise MalformedArchiveError("archive has two metadata entries")
                    metadata = payload
                    continue
                draft_id = _draft_id(member.name, config)
                if draft_id in drafts:
                    raise MalformedArchiveError(f"archive holds draft {draft_id} twice")
                drafts[draft_id] = payload
    except (tarfile.TarError, EOFError) as e:
        raise MalformedArchiveError(f"cannot read archive: {e}") from e
    if metadata is None:
        raise MalformedArchiveError("archive has no metadata entry")
    return metadata, drafts


def deserialize(data: bytes, author: Author,
                config: Optional[UpwellConfig] = None) -> Upwell:
    """Rebuild a bundle. Either returns a complete Upwell or raises
    MalformedArchiveError; nothing is built from a partial archive."""
    config = config or DEFAULT_CONFIG
    start = time.time()
    metadata_bytes, entries = _read_entries(data, config)
    try:
        metadata = UpwellMetadata.load(metadata_bytes)
    except MalformedContentError as e:
        raise MalformedArchiveError(f"cannot parse metadata: {e}") from e

    root_id = metadata.main
    if root_id not in entries:
        raise MalformedArchiveError(f"archive has no entry for root draft {root_id}")
    missing = set(metadata.draft_ids) - set(entries)
    if missing:
        raise MalformedArchiveError(f"archive is missing drafts {sorted(missing)}")

    stored: List[StoredDraft] = []
    for draft_id, binary in entries.items():
        if metadata.is_archived(draft_id) and draft_id != root_id:
            stored.append(Raw(draft_id, binary))
            continue
        try:
            stored.append(Hydrated(Draft.load(draft_id, binary)))
        except MalformedContentError as e:
            raise MalformedArchiveError(f"cannot load draft {draft_id}: {e}") from e
        logger.debug("(load_draft): %s", draft_id)

    upwell = Upwell(metadata, author)
    for item in stored:
        upwell._restore(item)
    logger.debug("(deserialize): execution time %dms", (time.time() - start) * 1000)
    return upwell


def serialize_async(upwell: Upwell,
                    config: Optional[UpwellConfig] = None) -> Awaitable[bytes]:
    """Encode the bundle now, on the calling thread, and build the archive
    in a worker thread. Edits made after the call are not included."""
    entries = _encode(upwell, config or DEFAULT_CONFIG)
    return asyncio.to_thread(_pack, entries)


async def deserialize_async(data: bytes, author: Author,
                            config: Optional[UpwellConfig] = None) -> Upwell:
    """Cancelling the awaiting task discards the result; no bundle is handed out."""
    return await asyncio.to_thread(deserialize, data, author, config)
