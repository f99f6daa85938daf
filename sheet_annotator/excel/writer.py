from __future__ import annotations

import re
import zipfile
from io import BytesIO

from openpyxl.workbook.workbook import Workbook

"""Workbook serialization and output naming.

openpyxl stamps zip entry times and the core properties with the current time
on save. To keep output bytes a pure function of the inputs, the saved archive
is rewritten with fixed entry timestamps and the core properties timestamps
copied from the original upload.
"""

__all__ = [
    "OUTPUT_SUFFIX",
    "suggest_output_name",
    "serialize_workbook",
]

OUTPUT_SUFFIX = "_with_estimates"

CORE_PROPS_PATH = "docProps/core.xml"
FIXED_ZIP_TIME = (1980, 1, 1, 0, 0, 0)
_CORE_STAMPS = ("created", "modified")
_SPREADSHEET_EXT_RE = re.compile(r"\.(xlsx|xls)$", re.IGNORECASE)


def suggest_output_name(
    original_name: str, output_name: str | None = None, *, suffix: str = OUTPUT_SUFFIX
) -> str:
    """``<base>_with_estimates.xlsx`` unless an explicit name is given (used verbatim)."""
    if output_name:
        return output_name
    base = _SPREADSHEET_EXT_RE.sub("", original_name)
    return f"{base}{suffix}.xlsx"


def _stamp_re(tag: str) -> re.Pattern[bytes]:
    return re.compile(rb"<dcterms:" + tag.encode() + rb"\b[^>]*?(?:/>|>.*?</dcterms:" + tag.encode() + rb">)", re.DOTALL)


def _core_stamps(archive_bytes: bytes) -> dict[str, bytes | None]:
    """Raw ``<dcterms:created>`` / ``<dcterms:modified>`` elements of an xlsx."""
    stamps: dict[str, bytes | None] = {tag: None for tag in _CORE_STAMPS}
    try:
        with zipfile.ZipFile(BytesIO(archive_bytes)) as zf:
            if CORE_PROPS_PATH not in zf.namelist():
                return stamps
            core = zf.read(CORE_PROPS_PATH)
    except zipfile.BadZipFile:
        return stamps
    for tag in _CORE_STAMPS:
        m = _stamp_re(tag).search(core)
        stamps[tag] = m.group(0) if m else None
    return stamps


def _pin_core_stamps(core: bytes, stamps: dict[str, bytes | None]) -> bytes:
    for tag, original in stamps.items():
        # 元ファイルに無い要素は削除 (保存時刻を出力に残さない)
        core = _stamp_re(tag).sub(lambda _m: original or b"", core, count=1)
    return core


def _stabilize_archive(payload: bytes, stamps: dict[str, bytes | None]) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(BytesIO(payload)) as src, zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as dst:
        for entry in src.infolist():
            data = src.read(entry.filename)
            if entry.filename == CORE_PROPS_PATH:
                data = _pin_core_stamps(data, stamps)
            info = zipfile.ZipInfo(entry.filename, date_time=FIXED_ZIP_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o100644 << 16
            dst.writestr(info, data)
    return buffer.getvalue()


def serialize_workbook(workbook: Workbook, original: bytes) -> bytes:
    """Save ``workbook`` to xlsx bytes; identical inputs give identical bytes.

    Args:
        workbook: Mutated (formula-preserving) workbook
        original: The uploaded bytes the workbook was loaded from
    """
    buffer = BytesIO()
    workbook.save(buffer)
    return _stabilize_archive(buffer.getvalue(), _core_stamps(original))
