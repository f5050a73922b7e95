from authapi import get_db
from authapi.models.category import Category
from tests.test_utils_seed import ensure_user, make_claim, give_claims, bearer


def _category(name='Garden'):
    session = get_db()
    cat = Category(name=name)
    session.add(cat); session.commit()
    return cat.id


def _writer(app, email='prod-writer@test.local'):
    uid = ensure_user(email)
    give_claims(uid, [make_claim('read', 'Product'), make_claim('write', 'Product')])
    return bearer(app, uid)


def test_product_create_get_update(client, app_instance):
    headers = _writer(app_instance)
    cid = _category()
    created = client.post('/api/products', json={
        'name': 'Rake', 'description': 'Steel', 'price': 12.5, 'stock': 4, 'category_id': cid,
    }, headers=headers)
    assert created.status_code == 201, created.get_json()
    body = created.get_json()
    assert body['price'] == 12.5
    assert body['category'] == {'id': cid, 'name': 'Garden'}

    pid = body['id']
    upd = client.put(f'/api/products/{pid}', json={
        'id': pid, 'name': 'Rake XL', 'price': '15.00', 'stock': 0, 'category_id': cid,
    }, headers=headers)
    assert upd.status_code == 204
    got = client.get(f'/api/products/{pid}', headers=headers).get_json()
    assert got['name'] == 'Rake XL'
    assert got['price'] == 15.0
    assert got['stock'] == 0


def test_product_validation(client, app_instance):
    headers = _writer(app_instance)
    cid = _category()
    base = {'name': 'Hose', 'price': 3, 'stock': 1, 'category_id': cid}
    assert client.post('/api/products', json=dict(base, price=0), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, price='abc'), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, stock=-1), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, category_id=9999), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, name='n' * 101), headers=headers).status_code == 400
    assert client.post('/api/products', json=base, headers=headers).status_code == 201


def test_product_list_filters(client, app_instance):
    headers = _writer(app_instance)
    garden = _category('Garden')
    kitchen = _category('Kitchen')
    for name, cid, price in (('Spade', garden, 20), ('Pan', kitchen, 30), ('Pot', kitchen, 10)):
        client.post('/api/products', json={'name': name, 'price': price, 'stock': 1, 'category_id': cid}, headers=headers)
    kitchen_rows = client.get(f'/api/products?category_id={kitchen}&sort=price', headers=headers).get_json()['data']
    assert [p['name'] for p in kitchen_rows] == ['Pot', 'Pan']
    by_name = client.get('/api/products?name=spa', headers=headers).get_json()['data']
    assert [p['name'] for p in by_name] == ['Spade']


def test_read_claim_does_not_allow_write(client, app_instance):
    uid = ensure_user('prod-reader@test.local')
    give_claims(uid, [make_claim('read', 'Product')])
    headers = bearer(app_instance, uid)
    assert client.get('/api/products', headers=headers).status_code == 200
    resp = client.post('/api/products', json={'name': 'x'}, headers=headers)
    assert resp.status_code == 403


def test_missing_product_is_404(client, app_instance):
    headers = _writer(app_instance)
    assert client.get('/api/products/424242', headers=headers).status_code == 404


def test_integer_fields_are_not_truncated_or_coerced(client, app_instance):
    headers = _writer(app_instance)
    cid = _category()
    base = {'name': 'Trowel', 'price': 4, 'stock': 2, 'category_id': cid}
    assert client.post('/api/products', json=dict(base, stock=2.7), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, stock=True), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, category_id=True), headers=headers).status_code == 400
    assert client.post('/api/products', json=dict(base, category_id=float(cid) + 0.5), headers=headers).status_code == 400
    missing = client.post('/api/products', json={k: v for k, v in base.items() if k != 'category_id'}, headers=headers)
    assert missing.status_code == 400
    assert missing.get_json()['error']['detail'] == 'category_id required'
    created = client.post('/api/products', json=dict(base, stock=3.0), headers=headers)
    assert created.status_code == 201
    assert created.get_json()['stock'] == 3
