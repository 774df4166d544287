import asyncio
from datetime import date, datetime, timedelta

import pytest

from fieldsales.domain.visits.service import VisitService, duration_minutes, visit_status
from fieldsales.shared.enums import VisitStatus
from fieldsales.shared.exceptions import ConflictError, NotFoundError, ValidationError

MONDAY = date(2024, 6, 3)


@pytest.fixture
def vendor(make_vendor):
    return make_vendor()


@pytest.fixture
def client(make_client):
    return make_client("Alpha")


@pytest.fixture
def service(db, clock, geocoder) -> VisitService:
    return VisitService(db, geocoder=geocoder, clock=clock)


@pytest.fixture
def visit(service, vendor, client):
    return service.create_visit(client.id, vendor.id, MONDAY)


def test_visit_status_is_derived_from_timestamps() -> None:
    t = datetime(2024, 6, 3, 9, 0)
    assert visit_status(None, None) is VisitStatus.SCHEDULED
    assert visit_status(t, None) is VisitStatus.IN_PROGRESS
    assert visit_status(t, t) is VisitStatus.COMPLETED


def test_duration_rounds_half_up_to_whole_minutes() -> None:
    start = datetime(2024, 6, 3, 9, 0, 0)
    assert duration_minutes(start, datetime(2024, 6, 3, 10, 35, 0)) == 95
    assert duration_minutes(start, datetime(2024, 6, 3, 9, 1, 30)) == 2
    assert duration_minutes(start, datetime(2024, 6, 3, 9, 1, 29)) == 1
    assert duration_minutes(start, None) is None


def test_create_visit_requires_known_client_and_vendor(service, vendor, client) -> None:
    with pytest.raises(NotFoundError):
        service.create_visit(999, vendor.id, MONDAY)
    with pytest.raises(NotFoundError):
        service.create_visit(client.id, 999, MONDAY)


def test_check_in_then_check_out_after_95_minutes(service, visit, clock, geocoder) -> None:
    result = asyncio.run(service.check_in(visit.id, -22.9056, -47.0608))

    assert result.geocode_degraded is False
    assert visit_status(result.visit.check_in_at, result.visit.check_out_at) is VisitStatus.IN_PROGRESS
    assert result.visit.check_in_address == geocoder.address

    clock.advance(minutes=95)
    result = asyncio.run(service.check_out(visit.id, notes="Pedido fechado"))

    checked = result.visit
    assert visit_status(checked.check_in_at, checked.check_out_at) is VisitStatus.COMPLETED
    assert duration_minutes(checked.check_in_at, checked.check_out_at) == 95
    assert checked.notes == "Pedido fechado"
    assert checked.check_out_address is None
    assert len(geocoder.calls) == 1


def test_double_check_in_is_rejected(service, visit) -> None:
    asyncio.run(service.check_in(visit.id))

    with pytest.raises(ConflictError):
        asyncio.run(service.check_in(visit.id))


def test_check_out_before_check_in_is_rejected(service, visit) -> None:
    with pytest.raises(ConflictError):
        asyncio.run(service.check_out(visit.id))


def test_second_check_out_is_rejected(service, visit) -> None:
    asyncio.run(service.check_in(visit.id))
    asyncio.run(service.check_out(visit.id))

    with pytest.raises(ConflictError):
        asyncio.run(service.check_out(visit.id))


def test_check_in_with_single_coordinate(service, visit) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(service.check_in(visit.id, latitude=-22.9))

    assert service.get_visit(visit.id).check_in_at is None


def test_geocode_failure_does_not_block_check_in(db, clock, failing_geocoder, visit) -> None:
    service = VisitService(db, geocoder=failing_geocoder, clock=clock)

    result = asyncio.run(service.check_in(visit.id, -22.9056, -47.0608))

    assert result.geocode_degraded is True
    assert result.visit.check_in_at == clock.now
    assert result.visit.check_in_latitude == -22.9056
    assert result.visit.check_in_address is None


def test_check_out_is_never_earlier_than_check_in(service, visit, clock) -> None:
    asyncio.run(service.check_in(visit.id))
    checked_in_at = clock.now
    clock.advance(minutes=-10)

    result = asyncio.run(service.check_out(visit.id))

    assert result.visit.check_out_at == checked_in_at
    assert duration_minutes(result.visit.check_in_at, result.visit.check_out_at) == 0


def test_delete_only_before_check_in(service, vendor, client, visit) -> None:
    asyncio.run(service.check_in(visit.id))
    with pytest.raises(ConflictError):
        service.delete_visit(visit.id)

    other = service.create_visit(client.id, vendor.id, MONDAY)
    other_id = other.id
    service.delete_visit(other_id)
    with pytest.raises(NotFoundError):
        service.get_visit(other_id)


def test_reschedule_only_while_scheduled(service, visit) -> None:
    moved = service.update_visit(visit.id, scheduled_date=date(2024, 6, 4), notes="Moved")
    assert moved.scheduled_date == date(2024, 6, 4)

    asyncio.run(service.check_in(visit.id))
    with pytest.raises(ConflictError):
        service.update_visit(visit.id, scheduled_date=date(2024, 6, 5))

    assert service.update_visit(visit.id, notes="Still editable").notes == "Still editable"


def test_list_visits_filters_by_derived_status(service, vendor, client) -> None:
    scheduled = service.create_visit(client.id, vendor.id, MONDAY)
    in_progress = service.create_visit(client.id, vendor.id, MONDAY)
    completed = service.create_visit(client.id, vendor.id, date(2024, 6, 4))
    asyncio.run(service.check_in(in_progress.id))
    asyncio.run(service.check_in(completed.id))
    asyncio.run(service.check_out(completed.id))

    def ids(**filters):
        return [v.id for v in service.list_visits(**filters)]

    assert ids(status=VisitStatus.SCHEDULED) == [scheduled.id]
    assert ids(status=VisitStatus.IN_PROGRESS) == [in_progress.id]
    assert ids(status=VisitStatus.COMPLETED) == [completed.id]
    assert ids(vendor_id=vendor.id)[0] == completed.id
    assert ids(on_date=MONDAY, limit=1) == [in_progress.id]


def test_monthly_summary(service, vendor, client, make_vendor) -> None:
    other_vendor = make_vendor("Bruno Lima")
    done = service.create_visit(client.id, vendor.id, MONDAY)
    service.create_visit(client.id, vendor.id, date(2024, 6, 20))
    service.create_visit(client.id, other_vendor.id, date(2024, 6, 10))
    service.create_visit(client.id, vendor.id, date(2024, 7, 1))
    asyncio.run(service.check_in(done.id))
    service.clock.advance(minutes=40)
    asyncio.run(service.check_out(done.id))

    summary = service.monthly_summary(2024, 6)

    assert summary["totals"] == {
        "total": 3,
        "completed": 1,
        "in_progress": 0,
        "scheduled": 2,
        "with_report": 0,
    }
    first, second = summary["vendors"]
    assert (first["vendor_name"], first["total"], first["completed"]) == ("Ana Souza", 2, 1)
    assert first["average_duration_minutes"] == 40
    assert (second["vendor_name"], second["average_duration_minutes"]) == ("Bruno Lima", None)

    with pytest.raises(ValidationError):
        service.monthly_summary(2024, 13)


def test_monthly_average_uses_unrounded_durations(service, vendor, client) -> None:
    # 10:30 and 10:24 round to 11 and 10 on their own, but average 10.45
    for elapsed in (timedelta(minutes=10, seconds=30), timedelta(minutes=10, seconds=24)):
        visit = service.create_visit(client.id, vendor.id, MONDAY)
        asyncio.run(service.check_in(visit.id))
        service.clock.advance(seconds=elapsed.total_seconds())
        asyncio.run(service.check_out(visit.id))

    (row,) = service.monthly_summary(2024, 6)["vendors"]

    assert row["completed"] == 2
    assert row["average_duration_minutes"] == 10
