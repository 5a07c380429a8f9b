"""OrderedCollection views over lists of uris"""
from __future__ import annotations

from typing import Sequence, Any

from furl import furl

from fedforum.activitypub.util import default_context


def item_uri(item: Any) -> str:
    return item if isinstance(item, str) else item.uri


def page_uri(collection_uri: str, page: int) -> str:
    f = furl(collection_uri)
    f.args['page'] = page
    return f.url


def create_collection(items: Sequence, collection_uri: str | None = None) -> dict:
    collection = {
        '@context': default_context(),
        'type': 'OrderedCollection',
        'totalItems': len(items),
        'orderedItems': [item_uri(item) for item in items],
    }
    if collection_uri:
        collection['id'] = collection_uri
    return collection


def create_paged_collection(items: Sequence, page_size: int, collection_uri: str, page: int | None = 1) -> dict:
    """Page ``page`` (1-indexed) of ``items``. Pages past the end are empty rather than an error."""
    page = 1 if page is None else page
    total = len(items)
    last_page = (total + page_size - 1) // page_size
    if page < 1:
        page_items = []
    else:
        page_items = items[(page - 1) * page_size:page * page_size]

    collection = {
        '@context': default_context(),
        'id': collection_uri,
        'type': 'OrderedCollectionPage',
        'partOf': collection_uri,
        'current': page_uri(collection_uri, page),
        'totalItems': total,
        'orderedItems': [item_uri(item) for item in page_items],
    }
    if 1 <= page < last_page:
        collection['next'] = page_uri(collection_uri, page + 1)
    if page > 1 and last_page >= 1:
        collection['prev'] = page_uri(collection_uri, min(page - 1, last_page))
    return collection
