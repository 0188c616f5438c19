import json
from datetime import date, time

import pytest

from conftest import make_request
from timeoff.errors import StoreError
from timeoff.models import Employee, RequestStatus, Shift, TimeOffKind
from timeoff.storage import RecordStore, find_employee_by_name


def test_round_trip_reproduces_records(tmp_path, employees):
    path = tmp_path / "store.json"
    store = RecordStore(path)
    for employee in employees.values():
        store.add_employee(employee)
    sick = make_request("E1", TimeOffKind.SICK, date(2025, 3, 3), date(2025, 3, 6))
    sick.verification_needed = True
    sick.notes = 'Flu, "bad" one\nsecond line'
    requests = [
        make_request("E1", TimeOffKind.PTO, date(2025, 7, 10)),
        make_request("E2", TimeOffKind.PFML, date(2025, 8, 1), status=RequestStatus.PENDING),
        make_request("E1", "VACATION", date(2025, 9, 1)),
        sick,
    ]
    for request in requests:
        store.add_request(request)
    store.add_shift(Shift(employee_name="Ellen Dock", day=date(2025, 7, 1), start_time=time(7), end_time=time(15, 30)))
    store.save()

    reloaded = RecordStore(path)

    assert reloaded.employees == employees
    assert reloaded.time_off_requests == requests
    assert reloaded.time_off_requests[2].kind == "VACATION"
    assert reloaded.shifts == store.shifts


def test_persisted_shape_uses_named_collections(tmp_path):
    path = tmp_path / "store.json"
    store = RecordStore(path)
    store.add_employee(Employee(id="E1", name="Ellen Dock", pto_hours=40))
    store.add_request(make_request("E1", TimeOffKind.PTO, date(2025, 7, 10)))
    store.save()

    payload = json.loads(path.read_text())

    assert set(payload) == {"employees", "timeOffRequests", "employeeSchedules"}
    assert payload["employees"][0]["ptoHours"] == 40
    assert payload["employees"][0]["pslHours"] is None
    record = payload["timeOffRequests"][0]
    assert record["kind"] == "PTO"
    assert record["status"] == "approved"
    assert record["startISO"] == "2025-07-10T15:00:00Z"
    assert record["endISO"] == "2025-07-10T23:00:00Z"


def test_integer_roster_ids_are_normalized_to_strings(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"employees": [{"id": 7, "name": "Pat Keel", "ptoHours": "12.5"}]}))

    store = RecordStore(path)

    assert store.get_employee(7) == Employee(id="7", name="Pat Keel", pto_hours=12.5)


def test_unreadable_store_raises(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")

    with pytest.raises(StoreError):
        RecordStore(path)


@pytest.mark.parametrize(
    "record",
    [
        {"id": "r1", "employeeId": "E1", "kind": "PTO", "startISO": "2025-07-10T15:00:00Z",
         "endISO": "2025-07-10T23:00:00Z", "hours": 8, "status": "cancelled", "createdAtISO": "2025-01-01T00:00:00Z"},
        {"id": "r2", "employeeId": "E1", "kind": "PTO", "endISO": "2025-07-10T23:00:00Z", "hours": 8,
         "status": "approved", "createdAtISO": "2025-01-01T00:00:00Z"},
    ],
)
def test_malformed_request_record_raises_store_error(tmp_path, record):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"employees": [], "timeOffRequests": [record]}))

    with pytest.raises(StoreError, match="Invalid record"):
        RecordStore(path)


def test_memory_store_never_touches_disk(tmp_path, employees):
    store = RecordStore()
    store.add_employee(employees["E1"])
    store.save()

    assert list(tmp_path.iterdir()) == []
    assert store.get_employee("E1").name == "Ellen Dock"


def test_find_employee_by_name_normalizes_case_and_whitespace(employees):
    assert find_employee_by_name(employees.values(), "  ellen   DOCK ").id == "E1"
    assert find_employee_by_name(employees.values(), "Ellen") is None
    assert find_employee_by_name(employees.values(), "   ") is None


def test_list_employees_and_requests_are_sorted():
    store = RecordStore()
    store.add_employee(Employee(id="b", name="Zelda Ops"))
    store.add_employee(Employee(id="a", name="anna dev"))
    later = make_request("a", TimeOffKind.PTO, date(2025, 8, 1))
    earlier = make_request("a", TimeOffKind.PTO, date(2025, 7, 1))
    store.add_request(later)
    store.add_request(earlier)
    store.add_request(make_request("b", TimeOffKind.PTO, date(2025, 6, 1)))

    assert [e.id for e in store.list_employees()] == ["a", "b"]
    assert store.find_requests("a") == [earlier, later]
