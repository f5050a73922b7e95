from authapi import get_db
from authapi.models.navigation import Navigation
from tests.test_utils_seed import ensure_user, grant, make_claim, give_claims, bearer


def _manager(app):
    uid = ensure_user('nav-admin@test.local')
    grant(subject_id=uid, action='*', resource_type='Navigation')
    return bearer(app, uid)


def test_navigation_crud_and_children(client, app_instance):
    headers = _manager(app_instance)
    parent = client.post('/api/navigations', json={'display': 'Catalog', 'order_path': '1'}, headers=headers)
    assert parent.status_code == 201
    pid = parent.get_json()['id']
    child = client.post('/api/navigations', json={
        'display': 'Products', 'link': '/products', 'parent_id': pid, 'order_path': '1.1',
    }, headers=headers)
    assert child.status_code == 201
    cid = child.get_json()['id']

    resp = client.delete(f'/api/navigations/{pid}', headers=headers)
    assert resp.status_code == 400
    assert 'children' in resp.get_json()['error']['detail']

    assert client.delete(f'/api/navigations/{cid}', headers=headers).status_code == 204
    assert client.delete(f'/api/navigations/{pid}', headers=headers).status_code == 204


def test_navigation_reference_validation(client, app_instance):
    headers = _manager(app_instance)
    assert client.post('/api/navigations', json={'display': 'x', 'parent_id': 999}, headers=headers).status_code == 400
    assert client.post('/api/navigations', json={'display': 'x', 'claim_id': 999}, headers=headers).status_code == 400
    nid = client.post('/api/navigations', json={'display': 'x'}, headers=headers).get_json()['id']
    resp = client.put(f'/api/navigations/{nid}', json={'display': 'x', 'parent_id': nid}, headers=headers)
    assert resp.status_code == 400


def test_mine_filters_by_held_claims(client, app_instance):
    headers = _manager(app_instance)
    read_products = make_claim('read', 'Product')
    write_products = make_claim('write', 'Product')
    for display, claim_id, path in (('Home', None, '0'), ('Browse', read_products, '1'), ('Edit', write_products, '2')):
        client.post('/api/navigations', json={'display': display, 'claim_id': claim_id, 'order_path': path}, headers=headers)

    reader = ensure_user('nav-reader@test.local')
    give_claims(reader, [read_products])
    shown = client.get('/api/navigations/mine', headers=bearer(app_instance, reader)).get_json()['data']
    assert [n['display'] for n in shown] == ['Home', 'Browse']

    everyone = ensure_user('nav-all@test.local')
    give_claims(everyone, [make_claim('*', '*', display_name='All access')])
    shown = client.get('/api/navigations/mine', headers=bearer(app_instance, everyone)).get_json()['data']
    assert [n['display'] for n in shown] == ['Home', 'Browse', 'Edit']


def test_navigation_listing_needs_grant(client, app_instance):
    uid = ensure_user('nav-none@test.local')
    assert client.get('/api/navigations', headers=bearer(app_instance, uid)).status_code == 403
    # The personal menu only needs a token
    assert client.get('/api/navigations/mine', headers=bearer(app_instance, uid)).status_code == 200


def test_entry_with_missing_claim_row_is_hidden(client, app_instance):
    session = get_db()
    session.add(Navigation(display='Orphaned', claim_id=987654))
    session.add(Navigation(display='Open'))
    session.commit()
    uid = ensure_user('nav-orphan@test.local')
    give_claims(uid, [make_claim('*', '*', display_name='All access')])
    shown = client.get('/api/navigations/mine', headers=bearer(app_instance, uid)).get_json()['data']
    assert [n['display'] for n in shown] == ['Open']
