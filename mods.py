"""Map a decoded MODS document onto the typed extension fields a hearing record needs.

GPO MODS files carry the congressional metadata in one or more ``<extension>``
blocks, e.g.::

    <mods xmlns="http://www.loc.gov/mods/v3">
      <extension>
        <congCommittee authorityId="hsif00" chamber="H">
          <name type="parsed">Energy and Commerce</name>
          <subCommittee authorityId="hsif14">
            <name type="parsed">Subcommittee on Health</name>
          </subCommittee>
        </congCommittee>
        <congress>110</congress>
        <session>1</session>
        <chamber>HOUSE</chamber>
        <jacketId>12-345</jacketId>
        ...
      </extension>
    </mods>

xmltodict returns a single child as a dict and repeated children as a list,
and an element with attributes as ``{"@attr": ..., "#text": ...}``. All of
that shape-juggling lives here so callers only see ``ModsExtension``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModsExtension:
    committee_thomas_id: str | None = None
    subcommittee_name: str | None = None
    congress_number: int | None = None
    congress_session: int | None = None
    chamber: str | None = None
    title: str | None = None
    jacket_id: str | None = None
    held_date: str | None = None
    is_appropriation: bool = False
    is_nomination: bool = False
    is_errata: bool = False

    @property
    def is_identifiable(self) -> bool:
        """Chamber, congress number and jacket id are all present."""
        return bool(self.chamber and self.congress_number and self.jacket_id)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _first(value: Any) -> Any:
    items = _as_list(value)
    return items[0] if items else None


def _text(value: Any) -> str | None:
    """Text content of the first element, whether it decoded as a str or a dict."""
    node = _first(value)
    if isinstance(node, dict):
        node = node.get("#text")
    if node is None:
        return None
    text = str(node).strip()
    return text or None


def _attr(value: Any, name: str) -> str | None:
    node = _first(value)
    if not isinstance(node, dict):
        return None
    attr = node.get(f"@{name}")
    return str(attr) if attr else None


def _int(value: Any) -> int | None:
    text = _text(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        log.debug("Non-numeric value in MODS extension: %r", text)
        return None


def _flag(value: Any) -> bool:
    return _text(value) == "true"


def extension_fragments(tree: dict) -> list[dict] | None:
    """Return the ``mods.extension`` blocks, or None when the document has none."""
    mods = tree.get("mods") if isinstance(tree, dict) else None
    if not isinstance(mods, dict):
        return None
    fragments = [f for f in _as_list(mods.get("extension")) if isinstance(f, dict)]
    return fragments or None


def merge_extensions(fragments: list[dict]) -> dict:
    """Flatten extension blocks into one mapping; later blocks win on key conflicts."""
    merged: dict = {}
    for fragment in fragments:
        merged.update(fragment)
    return merged


def parse_extension(ext: dict) -> ModsExtension:
    """Extract typed hearing fields from a merged extension mapping."""
    committee = _first(ext.get("congCommittee"))
    committee_id = _attr(committee, "authorityId")
    subcommittee_name = None
    if isinstance(committee, dict):
        subcommittee = _first(committee.get("subCommittee"))
        if isinstance(subcommittee, dict):
            subcommittee_name = _text(subcommittee.get("name"))

    chamber = _text(ext.get("chamber"))

    return ModsExtension(
        committee_thomas_id=committee_id[:4] if committee_id else None,
        subcommittee_name=subcommittee_name,
        congress_number=_int(ext.get("congress")),
        congress_session=_int(ext.get("session")),
        chamber=chamber.lower() if chamber else None,
        title=_text(ext.get("searchTitle")),
        jacket_id=_text(ext.get("jacketId")),
        held_date=_text(ext.get("heldDate")),
        is_appropriation=_flag(ext.get("isAppropriation")),
        is_nomination=_flag(ext.get("isNomination")),
        is_errata=_flag(ext.get("isErrata")),
    )


def parse_mods(tree: dict) -> ModsExtension | None:
    """Decoded MODS document -> ModsExtension, or None if it has no extension blocks."""
    fragments = extension_fragments(tree)
    if fragments is None:
        return None
    return parse_extension(merge_extensions(fragments))
