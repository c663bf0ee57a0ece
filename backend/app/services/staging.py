"""Staged wizard uploads.

A file attached to a wizard session is kept in Redis until the session
is submitted; the draft only stores a small descriptor:

    {"staged": "<id>", "name": "lease.pdf", "content_type": "...", "size": 1234}

At submit time `resolve_staged()` swaps every descriptor for a
PendingFile so the orchestrator can upload it. Blobs expire after
`settings.staged_file_ttl_seconds`.
"""

import logging
import uuid
from typing import Any

from app.config import settings
from app.middleware.exceptions import BusinessLogicError
from app.schemas.validators import is_staged_file
from app.utils.cache import get_binary_redis
from app.wizard.files import PendingFile, UploadRule

logger = logging.getLogger(__name__)


def _key(session_id: str, staged_id: str) -> str:
    return f"staged:{session_id}:{staged_id}"


async def stage_file(
    session_id: str,
    name: str,
    content_type: str,
    data: bytes,
    rule: UploadRule,
) -> dict:
    """Store an attachment and return its draft descriptor.

    The upload rule is checked here as well so oversized blobs never
    reach Redis; the upload phase checks again before sending.
    """
    rule.check(name, content_type, len(data))
    staged_id = uuid.uuid4().hex
    client = await get_binary_redis()
    await client.set(_key(session_id, staged_id), data, ex=settings.staged_file_ttl_seconds)
    logger.debug(f"Staged {name} ({len(data)} bytes) for session {session_id}")
    return {"staged": staged_id, "name": name, "content_type": content_type, "size": len(data)}


async def resolve_staged(session_id: str, node: Any) -> Any:
    """Return a copy of `node` with staged descriptors replaced by PendingFiles."""
    if is_staged_file(node):
        client = await get_binary_redis()
        data = await client.get(_key(session_id, node["staged"]))
        if data is None:
            raise BusinessLogicError(
                f"Attachment {node['name']} has expired, please upload it again",
                error_code="STAGED_FILE_EXPIRED",
            )
        return PendingFile(node["name"], node.get("content_type", "application/octet-stream"), data)
    if isinstance(node, dict):
        return {k: await resolve_staged(session_id, v) for k, v in node.items()}
    if isinstance(node, list):
        return [await resolve_staged(session_id, v) for v in node]
    return node


async def discard_staged(session_id: str) -> None:
    client = await get_binary_redis()
    keys = [key async for key in client.scan_iter(match=_key(session_id, "*"))]
    if keys:
        await client.delete(*keys)
