"""SqlStore against SQLite: same contract as MemoryStore, real transactions and competing writers."""
import pytest
from sqlalchemy import create_engine, event, text

from tests.test_utils_seed import ensure_part, ensure_profile, seed_order
from tracker.domain import OrderStatus, PartRequestStatus, RepairType, Role
from tracker.errors import ConflictError, PersistenceError
from tracker.services.inventory import InventoryService
from tracker.services.workflow import WorkflowEngine
from tracker.store import SqlStore, StoreError, build_store


@pytest.fixture()
def sql_store():
    store = build_store({'TRACKER_STORE': 'sql', 'DATABASE_URL': 'sqlite+pysqlite:///:memory:'})
    assert isinstance(store, SqlStore)
    yield store
    store.engine.dispose()


def test_select_insert_update(sql_store):
    ensure_part(sql_store, 'SP-002', name='Seal Kit', stock=3)
    ensure_part(sql_store, 'SP-001', name='Nozzle', stock=1)
    rows = sql_store.select('spareparts', order_by='name')
    assert [r['name'] for r in rows] == ['Nozzle', 'Seal Kit']
    assert [r['part_id'] for r in sql_store.select('spareparts', {'part_id': ['SP-001', 'SP-404']})] == ['SP-001']
    updated = sql_store.update('spareparts', {'stock': 7}, {'part_id': 'SP-002', 'stock': 3})
    assert updated[0]['stock'] == 7
    assert sql_store.update('spareparts', {'stock': 9}, {'part_id': 'SP-002', 'stock': 3}) == []


def test_update_where_references_changed_column(sql_store):
    order = seed_order(sql_store)
    rows = sql_store.update('orders', {'version': 2, 'progress': 40}, {'service_id': order.service_id, 'version': 1})
    assert rows[0]['version'] == 2
    assert rows[0]['repair_logs'] == []


def test_update_without_returning_keeps_filter(sql_store, monkeypatch):
    order = seed_order(sql_store)
    monkeypatch.setattr(sql_store.engine.dialect, 'update_returning', False)
    rows = sql_store.update('orders', {'version': 2}, {'service_id': order.service_id, 'version': 1})
    assert [r['version'] for r in rows] == [2]
    assert sql_store.update('orders', {'version': 3}, {'service_id': order.service_id, 'version': 1}) == []
    assert sql_store.get('orders', service_id=order.service_id)['version'] == 2


def test_unknown_column_is_a_store_error(sql_store):
    with pytest.raises(StoreError):
        sql_store.select('orders', {'nope': 1})


def test_atomic_rolls_back(sql_store):
    ensure_part(sql_store, 'SP-001', stock=1)
    with pytest.raises(RuntimeError):
        with sql_store.atomic():
            sql_store.update('spareparts', {'stock': 50}, {'part_id': 'SP-001'})
            raise RuntimeError('boom')
    assert sql_store.get('spareparts', part_id='SP-001')['stock'] == 1


def test_duplicate_key_surfaces_raw_reason(sql_store):
    ensure_part(sql_store, 'SP-001', stock=1)
    with pytest.raises(StoreError) as exc:
        sql_store.insert('spareparts', {'part_id': 'SP-001', 'name': 'Dup', 'stock': 0, 'status': 'Available', 'location': ''})
    assert 'UNIQUE' in str(exc.value)


def test_full_part_flow_on_sql(sql_store):
    ensure_part(sql_store, 'SP-001', stock=5)
    engineer = ensure_profile(sql_store, Role.ENGINEER)
    marketing = ensure_profile(sql_store, Role.MARKETING)
    engine = WorkflowEngine(sql_store)
    order = seed_order(sql_store)
    engine.request_parts(engineer, order.service_id, 'SP-001', 2, RepairType.MINOR)
    engine.review_part_requests(marketing, order.service_id, approved=True)
    result = engine.confirm_purchase_order(engineer, order.service_id)
    assert result.order.progress == 70
    assert sql_store.select('part_requests')[0]['status'] == PartRequestStatus.ORDERED
    assert len(sql_store.select('purchase_orders')) == 1
    stored = engine.get_order(order.service_id)
    assert stored.status == OrderStatus.REPAIR
    assert [l.action for l in stored.repair_logs] == [
        'Diagnosis & Part Request', 'Request Approved', 'Purchase Order Confirmed',
    ]


def test_failed_write_inside_transition_leaves_no_trace(sql_store, monkeypatch):
    ensure_part(sql_store, 'SP-001', stock=5)
    engineer = ensure_profile(sql_store, Role.ENGINEER)
    order = seed_order(sql_store)
    engine = WorkflowEngine(sql_store)
    real_update = sql_store.update

    def failing_update(collection, fields, where):
        if collection == 'orders':
            raise StoreError('disk I/O error')
        return real_update(collection, fields, where)

    monkeypatch.setattr(sql_store, 'update', failing_update)
    with pytest.raises(PersistenceError) as exc:
        engine.request_parts(engineer, order.service_id, 'SP-001', 1)
    assert exc.value.description == 'disk I/O error'
    assert sql_store.select('part_requests') == []


@pytest.fixture()
def file_store(tmp_path):
    store = build_store({'TRACKER_STORE': 'sql', 'DATABASE_URL': f'sqlite:///{tmp_path / "tracker.db"}'})
    yield store
    store.engine.dispose()


def _race_before_update(store, table, sql, params):
    """Commit `sql` from a second connection right before our first UPDATE of `table` runs."""
    racer = create_engine(store.engine.url)
    state = {'fired': False}

    def hook(conn, cursor, statement, parameters, context, executemany):
        if not state['fired'] and statement.lstrip().upper().startswith(f'UPDATE {table.upper()}'):
            state['fired'] = True
            with racer.begin() as other:
                other.execute(text(sql), params)

    event.listen(store.engine, 'before_cursor_execute', hook)
    return state, racer


def test_concurrent_order_write_is_a_conflict(file_store):
    engineer = ensure_profile(file_store, Role.ENGINEER)
    order = seed_order(file_store, OrderStatus.REPAIR, 60)
    state, racer = _race_before_update(
        file_store, 'orders',
        'UPDATE orders SET version = version + 1, progress = 77 WHERE service_id = :sid',
        {'sid': order.service_id},
    )
    with pytest.raises(ConflictError):
        WorkflowEngine(file_store).add_log(engineer, order.service_id, 'note')
    racer.dispose()
    assert state['fired']
    row = file_store.get('orders', service_id=order.service_id)
    assert row['version'] == 2
    assert row['progress'] == 77
    assert row['repair_logs'] == []


def test_concurrent_review_rolls_back_and_keeps_other_write(file_store):
    ensure_part(file_store, 'SP-001', stock=5)
    engine = WorkflowEngine(file_store)
    order = seed_order(file_store)
    engine.request_parts(ensure_profile(file_store, Role.ENGINEER), order.service_id, 'SP-001', 1)
    state, racer = _race_before_update(
        file_store, 'part_requests',
        "UPDATE part_requests SET status = 'Rejected' WHERE service_id = :sid",
        {'sid': order.service_id},
    )
    with pytest.raises(ConflictError):
        engine.review_part_requests(ensure_profile(file_store, Role.MARKETING), order.service_id, approved=True)
    racer.dispose()
    assert state['fired']
    assert file_store.select('part_requests')[0]['status'] == PartRequestStatus.REJECTED
    stored = engine.get_order(order.service_id)
    assert stored.status == OrderStatus.NEW
    assert stored.progress == 25
    assert stored.version == 2


def test_concurrent_stock_change_is_a_conflict(file_store):
    ensure_part(file_store, 'SP-001', stock=5)
    ppic = ensure_profile(file_store, Role.PPIC)
    state, racer = _race_before_update(
        file_store, 'spareparts',
        'UPDATE spareparts SET stock = stock + 3 WHERE part_id = :pid', {'pid': 'SP-001'},
    )
    with pytest.raises(ConflictError):
        InventoryService(file_store).add_stock(ppic, 'SP-001', 2)
    racer.dispose()
    assert state['fired']
    assert file_store.get('spareparts', part_id='SP-001')['stock'] == 8
    # without interference the same call applies
    part = InventoryService(file_store).add_stock(ppic, 'SP-001', 2)
    assert part.stock == 10
