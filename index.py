"""Elasticsearch access for hearing documents: existence check and create-if-absent."""

from __future__ import annotations

import logging

from elasticsearch import AsyncElasticsearch

log = logging.getLogger(__name__)


def get_es_client(host: str, auth: tuple[str, str] | None = None) -> AsyncElasticsearch:
    """Create an async Elasticsearch client; basic auth only when credentials are given."""
    if auth:
        return AsyncElasticsearch(hosts=[host], basic_auth=auth)
    return AsyncElasticsearch(hosts=[host])


class HearingIndex:
    """The hearings index, keyed by canonical hearing id."""

    def __init__(self, client: AsyncElasticsearch, index: str = "hearings"):
        self.client = client
        self.index = index

    async def exists(self, doc_id: str) -> bool:
        resp = await self.client.exists(index=self.index, id=doc_id)
        return bool(resp)

    async def create(self, doc_id: str, document: dict) -> None:
        """Write a new document. Elasticsearch rejects an existing id with a 409 ConflictError."""
        await self.client.create(index=self.index, id=doc_id, document=document)
        log.debug("Indexed %s in %s", doc_id, self.index)

    async def close(self) -> None:
        await self.client.close()
