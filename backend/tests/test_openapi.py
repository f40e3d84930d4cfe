from tracker.domain import OrderStatus, Role
from tracker.openapi import build_openapi_spec
from tracker.services.policy import Action, roles_for


def test_document_served(client):
    resp = client.get('/openapi.json')
    assert resp.status_code == 200
    doc = resp.get_json()
    assert doc['info']['title'] == 'Equipment Service Tracker API'
    for path in ('/orders', '/orders/{serviceId}/payment', '/part-requests', '/spareparts/{partId}/stock',
                 '/reports/invoices', '/portal/orders/{serviceId}'):
        assert path in doc['paths']


def test_roles_follow_policy():
    doc = build_openapi_spec()
    assert doc['paths']['/orders']['post']['x-allowed-roles'] == [Role.MARKETING]
    approve = doc['paths']['/part-requests/{serviceId}/approve']['post']
    assert approve['x-allowed-roles'] == roles_for(Action.APPROVE_PARTS)
    assert doc['paths']['/orders/{serviceId}/payment']['post']['x-allowed-roles'] == [Role.FINANCE]


def test_schemas_are_camel_case_and_hide_password():
    schemas = build_openapi_spec()['components']['schemas']
    assert 'serviceId' in schemas['Order']['properties']
    assert schemas['Order']['properties']['progress'] == {'type': 'integer'}
    assert schemas['Invoice']['properties']['amount'] == {'type': 'number'}
    assert 'passwordHash' not in schemas['Profile']['properties']
    assert schemas['Order']['x-transitions'][OrderStatus.QC] == [OrderStatus.DELIVERY, OrderStatus.QC]


def test_operation_ids_unique_and_stable():
    first, second = build_openapi_spec(), build_openapi_spec()
    assert first == second
    ids = [op['operationId'] for ops in first['paths'].values() for op in ops.values()]
    assert len(ids) == len(set(ids))
