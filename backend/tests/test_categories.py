from authapi import get_db
from authapi.models.category import Category
from authapi.models.product import Product
from tests.test_utils_seed import ensure_user, grant, bearer


def _editor(app, email='cat-editor@test.local'):
    uid = ensure_user(email)
    grant(subject_id=uid, action='*', resource_type='Category')
    return bearer(app, uid)


def test_category_crud_flow(client, app_instance):
    headers = _editor(app_instance)
    created = client.post('/api/categories', json={'name': 'Books', 'description': 'Paper'}, headers=headers)
    assert created.status_code == 201, created.get_json()
    cid = created.get_json()['id']

    got = client.get(f'/api/categories/{cid}', headers=headers)
    assert got.status_code == 200
    assert got.get_json()['name'] == 'Books'
    assert got.get_json()['products'] == []

    upd = client.put(f'/api/categories/{cid}', json={'id': cid, 'name': 'Novels'}, headers=headers)
    assert upd.status_code == 204
    assert client.get(f'/api/categories/{cid}', headers=headers).get_json()['name'] == 'Novels'

    assert client.delete(f'/api/categories/{cid}', headers=headers).status_code == 204
    assert client.get(f'/api/categories/{cid}', headers=headers).status_code == 404


def test_create_validates_name(client, app_instance):
    headers = _editor(app_instance)
    assert client.post('/api/categories', json={}, headers=headers).status_code == 400
    too_long = client.post('/api/categories', json={'name': 'x' * 51}, headers=headers)
    assert too_long.status_code == 400
    assert 'at most 50' in too_long.get_json()['error']['detail']


def test_put_rejects_mismatched_id(client, app_instance):
    headers = _editor(app_instance)
    cid = client.post('/api/categories', json={'name': 'A'}, headers=headers).get_json()['id']
    resp = client.put(f'/api/categories/{cid}', json={'id': cid + 1, 'name': 'B'}, headers=headers)
    assert resp.status_code == 400


def test_delete_refuses_category_with_products(client, app_instance):
    headers = _editor(app_instance)
    session = get_db()
    cat = Category(name='Full')
    session.add(cat); session.flush()
    session.add(Product(name='P', price=1, stock=0, category_id=cat.id))
    session.commit()
    resp = client.delete(f'/api/categories/{cat.id}', headers=headers)
    assert resp.status_code == 400
    assert 'contains products' in resp.get_json()['error']['detail']


def test_list_sorting_and_pagination(client, app_instance):
    headers = _editor(app_instance)
    for name in ('b', 'c', 'a'):
        client.post('/api/categories', json={'name': name}, headers=headers)
    body = client.get('/api/categories?sort=-name&limit=2', headers=headers).get_json()
    assert [c['name'] for c in body['data']] == ['c', 'b']
    assert body['pagination'] == {'total': 3, 'limit': 2, 'offset': 0, 'returned': 2}
    assert client.get('/api/categories?sort=bogus', headers=headers).status_code == 400
    assert client.get('/api/categories?limit=x', headers=headers).status_code == 400


def test_each_verb_needs_its_own_action(client, app_instance):
    uid = ensure_user('cat-reader@test.local')
    grant(subject_id=uid, action='Read', resource_type='Category')
    headers = bearer(app_instance, uid)
    assert client.get('/api/categories', headers=headers).status_code == 200
    assert client.post('/api/categories', json={'name': 'nope'}, headers=headers).status_code == 403
