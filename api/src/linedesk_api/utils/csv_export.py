from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .exported_keys import build_exported_key

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9\-_.]")
_NEEDS_QUOTES = ('"', ",", "\n", "\r")


@dataclass
class CsvLanguage:
    id: int
    code: str


@dataclass
class CsvEntry:
    key: str
    # language id -> text; absent ids are untranslated
    texts: Dict[int, str] = field(default_factory=dict)


@dataclass
class CsvGroup:
    name: str
    entries: List[CsvEntry] = field(default_factory=list)


def escape_csv(value: Optional[str]) -> str:
    if value is None:
        return ""
    if any(ch in value for ch in _NEEDS_QUOTES):
        return '"' + value.replace('"', '""') + '"'
    return value


def export_project_csv(
    project_name: str,
    languages: Sequence[CsvLanguage],
    groups: Sequence[CsvGroup],
) -> str:
    """
    One row per translation entry of the project.

    Columns are the exported key followed by one column per language ordered
    by code. Groups and entries keep the order they are given in.
    """
    ordered = sorted(languages, key=lambda lang: lang.code)
    rows: List[List[str]] = [["keys", *(lang.code for lang in ordered)]]
    for group in groups:
        for entry in group.entries:
            row = [build_exported_key(project_name, group.name, entry.key)]
            row.extend(entry.texts.get(lang.id, "") for lang in ordered)
            rows.append(row)
    return "\n".join(",".join(escape_csv(cell) for cell in row) for row in rows)


def csv_filename(project_name: str) -> str:
    return f"{_FILENAME_UNSAFE.sub('_', project_name) or 'export'}.csv"
