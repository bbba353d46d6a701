from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Optional


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    @property
    def option_list(self) -> List[str]:
        return [o for o in self.options.split(",") if o]

    def has_option(self, option: str) -> bool:
        return option in self.option_list

    def with_option(self, option: str) -> "FstabEntry":
        if self.has_option(option):
            return self
        return replace(self, options=",".join([*self.option_list, option]))


@dataclass(frozen=True)
class FstabLine:
    """One physical line; ``entry`` is None for comments and blanks."""

    raw: str
    entry: Optional[FstabEntry]


def parse_entry(line: str) -> Optional[FstabEntry]:
    body = line.split("#", 1)[0].strip()
    if not body:
        return None
    fields = body.split()
    if len(fields) < 3:
        return None
    return FstabEntry(
        spec=fields[0],
        mountpoint=fields[1],
        fstype=fields[2],
        options=fields[3] if len(fields) > 3 else "defaults",
        dump=int(fields[4]) if len(fields) > 4 and fields[4].isdigit() else 0,
        passno=int(fields[5]) if len(fields) > 5 and fields[5].isdigit() else 0,
    )


def parse_fstab(text: str) -> List[FstabLine]:
    return [FstabLine(raw=raw, entry=parse_entry(raw)) for raw in text.splitlines(keepends=True)]


def spec_matches_uuid(spec: str, uuid: str) -> bool:
    """True when an fstab source field names exactly the filesystem ``uuid``."""

    want = uuid.strip().lower()
    if not want:
        return False
    s = spec.strip()
    if s.upper().startswith("UUID="):
        return s[5:].strip('"').lower() == want
    if s.startswith("/dev/disk/by-uuid/"):
        return s[len("/dev/disk/by-uuid/"):].lower() == want
    return False


def find_uuid_entry(lines: List[FstabLine], uuid: str) -> Optional[int]:
    for i, line in enumerate(lines):
        if line.entry is not None and spec_matches_uuid(line.entry.spec, uuid):
            return i
    return None


def entry_for_uuid(text: str, uuid: str) -> Optional[FstabEntry]:
    lines = parse_fstab(text)
    idx = find_uuid_entry(lines, uuid)
    return None if idx is None else lines[idx].entry


_FIELD_SPLIT = re.compile(r"(\s+)")


def _replace_options(raw: str, options: str) -> str:
    ending = raw[len(raw.rstrip("\r\n")):]
    body = raw[: len(raw) - len(ending)]
    leading = body[: len(body) - len(body.lstrip())]
    tokens = _FIELD_SPLIT.split(body.lstrip())
    # tokens alternate field, separator, field, ...
    if len(tokens) >= 7:
        tokens[6] = options
    else:
        tokens.extend(["\t", options])
    return leading + "".join(tokens) + ending


def add_option_for_uuid(text: str, uuid: str, option: str) -> str:
    """Return ``text`` with ``option`` added to the entry for ``uuid`` only.

    Every other line is preserved byte for byte. Raises LookupError when no
    entry names ``uuid``.
    """

    lines = parse_fstab(text)
    idx = find_uuid_entry(lines, uuid)
    entry = None if idx is None else lines[idx].entry
    if idx is None or entry is None:
        raise LookupError(f"No fstab entry for UUID={uuid}")
    if entry.has_option(option):
        return text
    updated = entry.with_option(option)
    out = [line.raw for line in lines]
    out[idx] = _replace_options(lines[idx].raw, updated.options)
    return "".join(out)
