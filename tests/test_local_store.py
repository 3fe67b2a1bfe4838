import json

import pytest

import local_store
from local_store import LocalStore


def test_put_and_get(store):
    store.put(local_store.VENUES, {'id': 'v1', 'name': '体育館'})
    assert store.get(local_store.VENUES, 'v1')['name'] == '体育館'
    assert store.count(local_store.VENUES) == 1


def test_get_returns_copy(store):
    store.put(local_store.VENUES, {'id': 'v1', 'facilities': ['更衣室']})
    record = store.get(local_store.VENUES, 'v1')
    record['facilities'].append('シャワー')
    assert store.get(local_store.VENUES, 'v1')['facilities'] == ['更衣室']


def test_put_requires_id(store):
    with pytest.raises(ValueError):
        store.put(local_store.VENUES, {'name': 'no id'})


def test_transaction_is_discarded_on_error(store):
    store.put(local_store.VENUES, {'id': 'v1', 'name': 'before'})
    with pytest.raises(RuntimeError):
        with store.transaction() as tx:
            tx.put(local_store.VENUES, {'id': 'v1', 'name': 'after'})
            tx.put(local_store.VENUES, {'id': 'v2', 'name': 'new'})
            raise RuntimeError('boom')
    assert store.get(local_store.VENUES, 'v1')['name'] == 'before'
    assert store.get(local_store.VENUES, 'v2') is None


def test_legacy_list_format_is_keyed_by_id(tmp_path):
    path = tmp_path / 'legacy.json'
    path.write_text(json.dumps({
        local_store.FAVORITES: [{'id': 'f1', 'name': 'a'}, {'id': 'f2', 'name': 'b'}, {'name': 'no id'}],
    }), encoding='utf-8')
    store = LocalStore(str(path))
    assert store.count(local_store.FAVORITES) == 2
    assert store.get(local_store.FAVORITES, 'f2')['name'] == 'b'


def test_broken_file_reads_as_empty(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{not json', encoding='utf-8')
    assert LocalStore(str(path)).all(local_store.VENUES) == []


def test_clear_selected_keys(store):
    store.put(local_store.VENUES, {'id': 'v1'})
    store.put(local_store.EVENT_COMMENTS, {'id': 'c1'})
    store.clear([local_store.EVENT_COMMENTS])
    assert store.keys() == [local_store.VENUES]


def test_dump_and_load(store, tmp_path):
    store.put(local_store.VENUES, {'id': 'v1'})
    store.set_value(local_store.PRIVACY_SETTINGS, {'user_001': {'hide_from_participants': True}})

    other = LocalStore(str(tmp_path / 'other.json'))
    other.load_dump(store.dump())
    assert other.get(local_store.VENUES, 'v1') == {'id': 'v1'}
    assert other.get_value(local_store.PRIVACY_SETTINGS)['user_001']['hide_from_participants'] is True
    assert other.size_bytes() > 0


@pytest.mark.parametrize('dump', [
    {local_store.CREATED_EVENTS: {'x': 'str'}},
    {local_store.CREATED_EVENTS: 'str'},
    {local_store.VENUES: [{'id': 'v1'}, 3]},
    {local_store.PRIVACY_SETTINGS: {'user_001': True}},
])
def test_load_rejects_malformed_collections(store, dump):
    store.put(local_store.VENUES, {'id': 'v1'})
    assert local_store.invalid_dump_keys(dump) == list(dump)
    with pytest.raises(ValueError):
        store.load_dump(dump)
    assert store.get(local_store.VENUES, 'v1') == {'id': 'v1'}


def test_unknown_keys_are_not_checked():
    assert local_store.invalid_dump_keys({'system_settings': 'on', local_store.VENUES: [{'id': 'v1'}]}) == []
