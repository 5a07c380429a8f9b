"""
Tests for collection pagination.
"""
from fedforum.activitypub.collection import create_collection, create_paged_collection

ITEMS = ['a', 'b', 'c', 'd', 'e']
URI = 'https://test.localhost/user/alice/outbox/'


def test_middle_page():
    page = create_paged_collection(ITEMS, 2, URI, 2)
    assert page['type'] == 'OrderedCollectionPage'
    assert page['orderedItems'] == ['c', 'd']
    assert page['totalItems'] == 5
    assert page['next'] == URI + '?page=3'
    assert page['prev'] == URI + '?page=1'


def test_last_page():
    page = create_paged_collection(ITEMS, 2, URI, 3)
    assert page['orderedItems'] == ['e']
    assert 'next' not in page
    assert page['prev'] == URI + '?page=2'


def test_first_page_is_default():
    page = create_paged_collection(ITEMS, 2, URI, None)
    assert page['orderedItems'] == ['a', 'b']
    assert 'prev' not in page
    assert 'next' in page


def test_out_of_range_page_is_empty():
    page = create_paged_collection(ITEMS, 2, URI, 9)
    assert page['orderedItems'] == []
    assert page['totalItems'] == 5
    assert 'next' not in page


def test_empty_collection():
    page = create_paged_collection([], 100, URI, 1)
    assert page['orderedItems'] == []
    assert page['totalItems'] == 0
    assert 'next' not in page and 'prev' not in page


def test_page_identity():
    page = create_paged_collection(ITEMS, 2, URI, 2)
    assert page['id'] == URI
    assert page['partOf'] == URI
    assert page['@context'] == 'https://www.w3.org/ns/activitystreams'


def test_unpaged_collection():
    collection = create_collection(ITEMS, URI)
    assert collection['type'] == 'OrderedCollection'
    assert collection['totalItems'] == 5
    assert collection['orderedItems'] == ITEMS
