"""
Assembly Output Encoding
========================

The result of a successful assembly is a Blob: the assembled bss and raw
sections plus the resolved entry-point address. This module packages a
Blob into the JSON document written by `sasm`.

Output Format
-------------
```json
{
    "ok": true,
    "bss": "<standard base64 of the bss bytes>",
    "raw": "<standard base64 of the raw bytes>",
    "ep": 0
}
```
`ok` is always true: failures never produce a document. `ep` is a plain
non-negative integer that fits in 32 bits.
"""

from dataclasses import dataclass
from typing import Any
import base64
import json


@dataclass(frozen=True)
class Blob:
    """
    Final assembler output.

    Attributes:
        bss: Assembled bytes of the bss section
        raw: Assembled bytes of the raw section
        ep: Entry-point offset (the value of the entry symbol)
    """
    bss: bytes
    raw: bytes
    ep: int


def encode_blob(blob: Blob) -> dict[str, Any]:
    """Return the serializable form of a Blob."""
    return {
        "ok": True,
        "bss": base64.b64encode(blob.bss).decode("ascii"),
        "raw": base64.b64encode(blob.raw).decode("ascii"),
        "ep": blob.ep,
    }


def blob_to_json(blob: Blob, pretty: bool = False) -> str:
    """
    Serialize a Blob as JSON.

    Args:
        blob: The assembled output
        pretty: Indent the document for terminal display
    """
    return json.dumps(encode_blob(blob), indent=4 if pretty else None)
