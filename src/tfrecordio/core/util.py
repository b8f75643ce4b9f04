from __future__ import annotations
import base64
from typing import Dict, Any, Iterable
from .model import Summary


def summary_asdict(res: Summary, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not res.success:
        return {"success": False, "error": res.error, "records": res.records, "bytes_read": res.bytes_read}
    payload = {"records": res.records, "payload_bytes": res.payload_bytes}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "bytes_read": res.bytes_read})
    return payload


def record_asdict(index: int, record: bytes, *, text: bool = False) -> Dict[str, Any]:
    """Describe one record for JSON-lines output."""
    out: Dict[str, Any] = {"index": index, "length": len(record)}
    if text:
        out["text"] = record.decode("utf-8", errors="replace")
    else:
        out["data_b64"] = base64.b64encode(record).decode()
    return out
