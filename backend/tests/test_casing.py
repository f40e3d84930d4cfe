from tracker.store.casing import camel_key, snake_key, to_camel_case, to_snake_case


def test_key_conversion():
    assert snake_key('serviceId') == 'service_id'
    assert snake_key('quantityRequested') == 'quantity_requested'
    assert camel_key('assigned_engineer') == 'assignedEngineer'
    assert camel_key('status') == 'status'


def test_camel_round_trip_nested():
    record = {
        'serviceId': 'SRV-20260101-ABC123',
        'progress': 40,
        'qcResult': None,
        'repairLogs': [
            {'logId': 'LOG-1', 'serviceId': 'SRV-20260101-ABC123', 'notes': 'a_b stays'},
            {'logId': 'LOG-2', 'meta': {'innerKey': [1, {'deepKey': True}]}},
        ],
        'tags': ('x', {'tupleKey': 1}),
    }
    snake = to_snake_case(record)
    assert set(snake) == {'service_id', 'progress', 'qc_result', 'repair_logs', 'tags'}
    assert snake['repair_logs'][1]['meta']['inner_key'][1] == {'deep_key': True}
    assert snake['repair_logs'][0]['notes'] == 'a_b stays'
    assert to_camel_case(snake) == record


def test_values_untouched():
    assert to_camel_case('some_string') == 'some_string'
    assert to_snake_case([1, 'twoThree', None]) == [1, 'twoThree', None]
    assert to_camel_case({1: {'a_b': 2}}) == {1: {'aB': 2}}
