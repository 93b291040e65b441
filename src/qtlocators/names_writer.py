from __future__ import annotations

from dataclasses import dataclass
from difflib import unified_diff
import logging
import os
from pathlib import Path
import re
import tempfile
from typing import Iterable, Sequence

from .models import Locator
from .renderer import DEFAULT_INDENT, render_locator

logger = logging.getLogger(__name__)

_DECLARATION_PATTERN = re.compile(r"(?m)^(\w+)[ \t]*=(?!=)")


@dataclass(frozen=True, slots=True)
class NamesPatchResult:
    ok: bool
    changed: bool
    message: str
    updated_source: str
    added_uids: tuple[str, ...]
    skipped_uids: tuple[str, ...]
    notes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class NamesPreview:
    ok: bool
    target_file: Path
    message: str
    diff_text: str
    original_source: str | None
    updated_source: str | None
    target_existed: bool
    added_uids: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()


def unique_locators(locators: Iterable[Locator]) -> list[Locator]:
    """Drop repeated declarations (same uid), keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Locator] = []
    for locator in locators:
        if locator.uid in seen:
            continue
        seen.add(locator.uid)
        unique.append(locator)
    return unique


def declared_uids(source: str) -> set[str]:
    return set(_DECLARATION_PATTERN.findall(source))


def merge_declarations(
    source: str,
    locators: Sequence[Locator],
    indent: int = DEFAULT_INDENT,
) -> NamesPatchResult:
    line_ending = _detect_line_ending(source)
    existing = declared_uids(source)
    notes: list[str] = []

    added: list[Locator] = []
    skipped: list[str] = []
    for locator in unique_locators(locators):
        if locator.uid in existing:
            skipped.append(locator.uid)
            continue
        added.append(locator)

    available = existing | {locator.uid for locator in added}
    for locator in added:
        if locator.container_uid and locator.container_uid not in available:
            notes.append(f"Container {locator.container_uid} is not declared.")

    if not added:
        return NamesPatchResult(
            ok=True,
            changed=False,
            message="All declarations already present; no changes applied.",
            updated_source=source,
            added_uids=(),
            skipped_uids=tuple(skipped),
            notes=tuple(notes),
        )

    block = "\n".join(render_locator(locator, indent=indent) for locator in added)
    head = source.replace("\r\n", "\n").rstrip()
    updated = f"{head}\n\n{block}" if head else block
    if line_ending != "\n":
        updated = updated.replace("\n", line_ending)

    return NamesPatchResult(
        ok=True,
        changed=True,
        message=f"Added {len(added)} declaration(s).",
        updated_source=updated,
        added_uids=tuple(locator.uid for locator in added),
        skipped_uids=tuple(skipped),
        notes=tuple(notes),
    )


def generate_names_preview(
    target_file: Path,
    locators: Sequence[Locator],
    indent: int = DEFAULT_INDENT,
) -> NamesPreview:
    target_existed = target_file.exists()
    if target_existed:
        try:
            original_source = target_file.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return NamesPreview(
                ok=False,
                target_file=target_file,
                message=f"Could not read target file: {exc}",
                diff_text="",
                original_source=None,
                updated_source=None,
                target_existed=True,
            )
    else:
        original_source = ""

    patch = merge_declarations(original_source, locators, indent=indent)
    if not patch.changed:
        return NamesPreview(
            ok=False,
            target_file=target_file,
            message=patch.message,
            diff_text="",
            original_source=original_source,
            updated_source=original_source,
            target_existed=target_existed,
            notes=patch.notes,
        )

    diff = "".join(
        unified_diff(
            original_source.splitlines(keepends=True),
            patch.updated_source.splitlines(keepends=True),
            fromfile=str(target_file) if target_existed else "/dev/null",
            tofile=str(target_file),
        )
    )
    return NamesPreview(
        ok=True,
        target_file=target_file,
        message=patch.message,
        diff_text=diff,
        original_source=original_source,
        updated_source=patch.updated_source,
        target_existed=target_existed,
        added_uids=patch.added_uids,
        notes=patch.notes,
    )


def apply_names_preview(preview: NamesPreview) -> tuple[bool, str, Path | None]:
    if not preview.ok or preview.updated_source is None or preview.original_source is None:
        return False, "No preview to apply.", None

    target_file = preview.target_file
    if preview.target_existed:
        try:
            current_source = target_file.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return False, f"Could not read target file before apply: {exc}", None
    elif target_file.exists():
        return False, "Target file was created after preview. Regenerate preview before apply.", None
    else:
        current_source = ""

    if current_source != preview.original_source:
        return False, "Target file changed after preview. Regenerate preview before apply.", None

    backup_path = Path(f"{target_file}.bak") if preview.target_existed else None
    ok, write_message = _write_with_backup_atomic(
        target_file=target_file,
        current_source=current_source,
        updated_source=preview.updated_source,
        backup_path=backup_path,
    )
    if not ok:
        return False, write_message, None

    logger.debug("Wrote %d declaration(s) to %s", len(preview.added_uids), target_file)
    if backup_path is None:
        return True, f"Applied. Created {target_file}", None
    return True, f"Applied. Backup created at {backup_path}", backup_path


def _write_with_backup_atomic(
    *,
    target_file: Path,
    current_source: str,
    updated_source: str,
    backup_path: Path | None,
) -> tuple[bool, str]:
    if backup_path is not None:
        try:
            backup_path.write_bytes(current_source.encode("utf-8"))
        except OSError as exc:
            return False, f"Could not create backup: {exc}"

    temp_path: Path | None = None
    try:
        target_file.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{target_file.name}.", suffix=".tmp", dir=str(target_file.parent))
        temp_path = Path(temp_name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as temp_file:
            temp_file.write(updated_source)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        temp_path.replace(target_file)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write target file: {exc}"

    return True, "ok"


def _detect_line_ending(source: str) -> str:
    return "\r\n" if "\r\n" in source else "\n"
