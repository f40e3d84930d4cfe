from tests.test_utils_seed import headers_for
from tracker.domain import Role
from tracker.store import StoreError


def test_not_found_shape(client, app_instance, store):
    resp = client.get('/orders/SRV-NOPE', headers=headers_for(app_instance, store, Role.QC))
    assert resp.status_code == 404
    err = resp.get_json()['error']
    assert err['status'] == 404
    assert err['title'] == 'Not Found'
    assert 'SRV-NOPE' in err['detail']


def test_unknown_route_uses_error_shape(client):
    resp = client.get('/nowhere')
    assert resp.status_code == 404
    assert resp.get_json()['error']['status'] == 404


def test_unhandled_exception_is_500(app_instance, client):
    def boom():
        raise RuntimeError('kaboom')
    app_instance.add_url_rule('/boom', 'boom', boom)
    resp = client.get('/boom')
    assert resp.status_code == 500
    assert resp.get_json() == {
        'error': {'status': 500, 'title': 'Internal Server Error', 'detail': 'Unexpected error'},
    }


def test_store_failure_is_503_with_reason(client, app_instance, store, monkeypatch):
    headers = headers_for(app_instance, store, Role.MARKETING)

    def broken(*_a, **_k):
        raise StoreError('could not connect to server')
    monkeypatch.setattr(store, 'select', broken)
    resp = client.get('/orders', headers=headers)
    assert resp.status_code == 503
    err = resp.get_json()['error']
    assert err['title'] == 'Store Unavailable'
    assert err['detail'] == 'could not connect to server'


def test_health(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
