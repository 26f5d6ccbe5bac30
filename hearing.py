"""Build a hearing record from its MODS metadata and transcript, and index it once."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from fetch import Fetcher
from index import HearingIndex
from mods import ModsExtension, parse_mods
from utils import content_url, hearing_id, hearing_id_from_url, mods_url

log = logging.getLogger(__name__)


class Outcome(str, Enum):
    INDEXED = "indexed"
    EXISTS = "exists"
    NO_EXTENSIONS = "no_extensions"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


@dataclass(frozen=True)
class HearingRecord:
    id: str
    committee_thomas_id: str | None
    subcommittee_name: str | None
    congress_number: int | None
    congress_session: int | None
    congress_chamber: str | None
    title: str | None
    jacket_id: str | None
    held_date: str | None
    is_appropriation: bool
    is_nomination: bool
    is_errata: bool
    content: str

    @classmethod
    def from_mods(cls, doc_id: str, ext: ModsExtension, content: str) -> HearingRecord:
        return cls(
            id=doc_id,
            committee_thomas_id=ext.committee_thomas_id,
            subcommittee_name=ext.subcommittee_name,
            congress_number=ext.congress_number,
            congress_session=ext.congress_session,
            congress_chamber=ext.chamber,
            title=ext.title,
            jacket_id=ext.jacket_id,
            held_date=ext.held_date,
            is_appropriation=ext.is_appropriation,
            is_nomination=ext.is_nomination,
            is_errata=ext.is_errata,
            content=content,
        )

    def to_document(self) -> dict:
        """Index body. The id is the document key, not a field."""
        return {
            "committeeThomasId": self.committee_thomas_id,
            "subcommitteeName": self.subcommittee_name,
            "congressNumber": self.congress_number,
            "congressSession": self.congress_session,
            "congressChamber": self.congress_chamber,
            "title": self.title,
            "jacketId": self.jacket_id,
            "heldDate": self.held_date,
            "isAppropriation": self.is_appropriation,
            "isNomination": self.is_nomination,
            "isErrata": self.is_errata,
            "content": self.content,
        }


class BuildResult(NamedTuple):
    outcome: Outcome
    hearing_id: str | None = None


class HearingBuilder:
    """Turns a GPO detail-page URL into at most one indexed hearing document."""

    def __init__(self, fetcher: Fetcher, index: HearingIndex, content_url_template: str):
        self.fetcher = fetcher
        self.index = index
        self.content_url_template = content_url_template

    async def build_and_store(self, detail_url: str, checked_exists: bool = False,
                              checked_id: str | None = None) -> BuildResult:
        """Fetch MODS + transcript for ``detail_url`` and index the hearing if it's new.

        ``checked_exists`` means the caller already confirmed an id is absent.
        When ``checked_id`` names that id, the lookup is only skipped if it
        matches the id derived from MODS.
        """
        tree = await self.fetcher.fetch_xml(mods_url(detail_url))
        ext = parse_mods(tree)
        if ext is None:
            log.warning("No extensions in mods file: %s", detail_url)
            return BuildResult(Outcome.NO_EXTENSIONS)

        if not ext.is_identifiable:
            log.debug(
                "Missing chamber/congress/jacket for %s (chamber=%s congress=%s jacket=%s)",
                detail_url, ext.chamber, ext.congress_number, ext.jacket_id,
            )
            return BuildResult(Outcome.INCOMPLETE)

        doc_id = hearing_id(ext.chamber, ext.congress_number, ext.jacket_id)
        skip_lookup = checked_exists and (checked_id is None or checked_id == doc_id)
        if checked_id is not None and checked_id != doc_id:
            log.debug("URL id %s differs from MODS id %s for %s", checked_id, doc_id, detail_url)
        if not skip_lookup and await self.index.exists(doc_id):
            log.debug("Already indexed: %s", doc_id)
            return BuildResult(Outcome.EXISTS, doc_id)

        text = await self.fetcher.fetch_text(content_url(detail_url, self.content_url_template))
        record = HearingRecord.from_mods(doc_id, ext, text)

        try:
            await self.index.create(doc_id, record.to_document())
        except Exception as e:
            log.error("Failed to index %s (%s): %s", doc_id, detail_url, e)
            raise
        log.info("Indexed %s: %s", doc_id, (record.title or "")[:60])
        return BuildResult(Outcome.INDEXED, doc_id)

    async def process(self, detail_url: str) -> BuildResult:
        """Check the index using an id read off the URL before fetching anything.

        Page ids that don't match the CHRG-<congress><h|s>hrg<jacket> pattern
        go straight through build_and_store.
        """
        doc_id = hearing_id_from_url(detail_url)
        if doc_id is None:
            return await self.build_and_store(detail_url)
        if await self.index.exists(doc_id):
            log.debug("Already indexed: %s", doc_id)
            return BuildResult(Outcome.EXISTS, doc_id)
        return await self.build_and_store(detail_url, checked_exists=True, checked_id=doc_id)
