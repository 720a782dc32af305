import json
from datetime import datetime, timedelta, timezone

import pytest

from routebook.models.domain import AppData, AttendanceMark, Client, Location, Route, WeeklyStatus
from routebook.persistence.codec import encode_app_data
from routebook.persistence.storage import InMemoryKeyValueStorage, StorageReadError, StorageWriteError
from routebook.services.store import AttendanceStore, iso_timestamp

KEY = "routes_app_data"
FRIDAY = datetime(2025, 2, 14, 9, 0, tzinfo=timezone.utc)  # week 2025-07


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class SequenceIds:
    def __init__(self, *values: str) -> None:
        self.values = list(values)

    def __call__(self) -> str:
        return self.values.pop(0)


class RecordingStorage(InMemoryKeyValueStorage):
    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set(key, value)


class FlakyStorage(InMemoryKeyValueStorage):
    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        super().set(key, value)


class UnreadableStorage(InMemoryKeyValueStorage):
    def get(self, key: str):
        raise StorageReadError("storage unavailable")


def _client(cid: str, name: str) -> Client:
    return Client(
        id=cid,
        name=name,
        phone="11 99999-0000",
        location=Location(lat=-23.55, lng=-46.63, address="Rua A, São Paulo"),
        created_at="2025-01-02T10:00:00.000Z",
    )


def _stored(week_key: str) -> AppData:
    return AppData(
        clients=[_client("c1", "Ana"), _client("c2", "Bruno")],
        routes=[Route(id="r1", name="Centro", days_of_week=["monday"], client_order=["c1", "c2"])],
        weekly_status=WeeklyStatus(
            week_key=week_key,
            attended={"r1": {"c1": AttendanceMark(checked=True, checked_at="2025-01-06T12:00:00.000Z")}},
        ),
    )


def _store(storage=None, now: datetime = FRIDAY, ids=None) -> AttendanceStore:
    return AttendanceStore(
        storage if storage is not None else InMemoryKeyValueStorage(),
        clock=FakeClock(now),
        id_generator=ids,
        storage_key=KEY,
    )


def test_first_load_starts_empty_and_stamps_week():
    storage = InMemoryKeyValueStorage()
    store = _store(storage)

    data = store.load()

    assert data.clients == []
    assert data.routes == []
    assert data.weekly_status == WeeklyStatus(week_key="2025-07", attended={})
    assert json.loads(storage.get(KEY))["weeklyStatus"] == {"weekKey": "2025-07", "attended": {}}


def test_load_resets_attendance_when_week_changed():
    original = encode_app_data(_stored("2025-06"))
    storage = InMemoryKeyValueStorage({KEY: original})

    data = _store(storage).load()

    assert data.weekly_status.week_key == "2025-07"
    assert data.weekly_status.attended == {}
    persisted = json.loads(storage.get(KEY))
    before = json.loads(original)
    assert persisted["clients"] == before["clients"]
    assert persisted["routes"] == before["routes"]
    assert persisted["weeklyStatus"] == {"weekKey": "2025-07", "attended": {}}


def test_load_keeps_current_week_unchanged():
    stored = _stored("2025-07")
    storage = RecordingStorage({KEY: encode_app_data(stored)})

    data = _store(storage).load()

    assert data == stored
    assert storage.writes == []


def test_refresh_in_a_new_week_resets_attendance():
    storage = InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    store.load()
    assert store.data.weekly_status.attended

    store.clock.advance(days=3)  # Monday of week 2025-08
    data = store.refresh()

    assert data.weekly_status.week_key == "2025-08"
    assert data.weekly_status.attended == {}
    assert len(data.clients) == 2


def test_corrupt_blob_loads_default_and_keeps_a_copy():
    storage = InMemoryKeyValueStorage({KEY: "{not json"})

    data = _store(storage).load()

    assert data.clients == [] and data.routes == []
    assert data.weekly_status.week_key == "2025-07"
    assert storage.get(f"{KEY}_corrupt") == "{not json"


def test_unreadable_storage_loads_default():
    data = _store(UnreadableStorage()).load()

    assert data.clients == []
    assert data.weekly_status.week_key == "2025-07"


def test_add_client_generates_id_and_timestamp():
    store = _store(ids=SequenceIds("id-1"))

    client = store.add_client(name="  Ana ", location=Location(lat=1, lng=2, address=" "), phone="")

    assert client.id == "id-1"
    assert client.name == "Ana"
    assert client.phone is None
    assert client.location == Location(lat=1, lng=2, address=None)
    assert client.created_at == "2025-02-14T09:00:00.000Z"
    assert store.data.clients == [client]


def test_colliding_ids_are_redrawn():
    store = _store(ids=SequenceIds("dup", "dup", "fresh"))

    first = store.add_client(name="Ana", location=Location(lat=1, lng=2))
    second = store.add_client(name="Bruno", location=Location(lat=3, lng=4))

    assert (first.id, second.id) == ("dup", "fresh")


def test_update_client_merges_given_fields_only():
    storage = InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)

    assert store.update_client("c1", phone="11 1234-5678") is True

    client = store.data.clients[0]
    assert client.phone == "11 1234-5678"
    assert client.name == "Ana"
    assert client.location.address == "Rua A, São Paulo"
    assert client.created_at == "2025-01-02T10:00:00.000Z"


def test_update_unknown_client_is_a_silent_noop():
    storage = RecordingStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    store.load()

    assert store.update_client("missing", name="Zé") is False
    assert store.update_route("missing", name="Norte") is False
    assert storage.writes == []


def test_update_client_rejects_unknown_fields():
    store = _store()
    with pytest.raises(TypeError):
        store.update_client("c1", created_at="now")


def test_delete_client_cascades_to_routes():
    data = _stored("2025-07")
    data.routes.append(Route(id="r2", name="Norte", days_of_week=["tuesday"], client_order=["c2"]))
    data.routes.append(Route(id="r3", name="Sul", days_of_week=["friday"], client_order=["c1"]))
    store = _store(InMemoryKeyValueStorage({KEY: encode_app_data(data)}))
    untouched = store.data.routes[1]

    assert store.delete_client("c1") is True

    after = store.data
    assert [client.id for client in after.clients] == ["c2"]
    assert after.routes[0].client_order == ["c2"]
    assert after.routes[1] is untouched
    assert after.routes[2].client_order == []


def test_delete_unknown_client_is_a_noop():
    storage = RecordingStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    store.load()

    assert store.delete_client("missing") is False
    assert storage.writes == []


def test_delete_route_removes_its_attendance_only():
    data = _stored("2025-07")
    data.routes.append(Route(id="r2", name="Norte", days_of_week=["tuesday"], client_order=["c2"]))
    data.weekly_status.attended["r2"] = {"c2": AttendanceMark(checked=True, checked_at="2025-02-11T08:00:00.000Z")}
    store = _store(InMemoryKeyValueStorage({KEY: encode_app_data(data)}))

    assert store.delete_route("r1") is True

    after = store.data
    assert [route.id for route in after.routes] == ["r2"]
    assert "r1" not in after.weekly_status.attended
    assert after.weekly_status.attended["r2"]["c2"].checked is True


def test_delete_route_without_attendance_entry():
    data = _stored("2025-07")
    data.weekly_status.attended = {}
    store = _store(InMemoryKeyValueStorage({KEY: encode_app_data(data)}))

    assert store.delete_route("r1") is True
    assert store.data.weekly_status.attended == {}


def test_toggle_twice_restores_value_and_restamps():
    store = _store(InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))}))
    first_at = store.clock()

    first = store.toggle_client_attended("r1", "c2")
    store.clock.advance(minutes=5)
    second = store.toggle_client_attended("r1", "c2")

    assert first == AttendanceMark(checked=True, checked_at=iso_timestamp(first_at))
    assert second == AttendanceMark(checked=False, checked_at="2025-02-14T09:05:00.000Z")
    assert store.data.weekly_status.attended["r1"]["c2"] == second
    assert store.data.weekly_status.attended["r1"]["c1"].checked is True


def test_toggle_creates_route_mapping():
    store = _store()

    mark = store.toggle_client_attended("new-route", "c9")

    assert store.data.weekly_status.attended == {"new-route": {"c9": mark}}
    assert mark.checked is True


def test_reset_week_clears_every_route():
    store = _store(InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))}))

    status = store.reset_week()

    assert status == WeeklyStatus(week_key="2025-07", attended={})
    assert store.data.weekly_status == status
    assert len(store.data.clients) == 2


def test_failed_write_is_reported_and_not_applied():
    storage = FlakyStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    before = store.data
    stored_blob = storage.get(KEY)
    storage.fail_writes = True

    with pytest.raises(StorageWriteError):
        store.add_client(name="Carla", location=Location(lat=0, lng=0))
    with pytest.raises(StorageWriteError):
        store.toggle_client_attended("r1", "c2")
    with pytest.raises(StorageWriteError):
        store.delete_route("r1")

    assert store.data is before
    assert storage.get(KEY) == stored_blob


def test_end_to_end_scenario():
    store = _store(ids=SequenceIds("client-1", "route-1"))
    store.load()

    client = store.add_client(name="Ana", location=Location(lat=1, lng=2))
    route = store.add_route(name="R1", days_of_week=["monday"], client_order=[])
    assert client.id == "client-1" and client.created_at
    assert route.id == "route-1"

    store.update_route(route.id, client_order=[client.id])
    store.toggle_client_attended(route.id, client.id)
    assert store.data.weekly_status.attended[route.id][client.id].checked is True

    store.toggle_client_attended(route.id, client.id)
    assert store.data.weekly_status.attended[route.id][client.id].checked is False


def test_next_week_load_shows_empty_attendance():
    storage = InMemoryKeyValueStorage()
    first = _store(storage)
    client = first.add_client(name="Ana", location=Location(lat=1, lng=2))
    route = first.add_route(name="R1", days_of_week=["friday"], client_order=[client.id])
    first.toggle_client_attended(route.id, client.id)

    second = _store(storage, now=FRIDAY + timedelta(days=7))
    data = second.load()

    assert data.weekly_status.week_key == "2025-08"
    assert data.weekly_status.attended == {}
    assert len(data.clients) == 1
    assert len(data.routes) == 1


def test_cached_data_rolls_over_without_refresh():
    storage = InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    store.load()

    store.clock.advance(days=3)  # Monday of week 2025-08

    assert store.data.weekly_status == WeeklyStatus(week_key="2025-08", attended={})
    assert json.loads(storage.get(KEY))["weeklyStatus"] == {"weekKey": "2025-08", "attended": {}}
    assert len(store.data.clients) == 2


def test_toggle_after_rollover_is_kept_for_the_new_week():
    storage = InMemoryKeyValueStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    store.load()
    store.clock.advance(days=3)

    mark = store.toggle_client_attended("r1", "c2")

    assert store.data.weekly_status == WeeklyStatus(week_key="2025-08", attended={"r1": {"c2": mark}})
    reloaded = _store(storage, now=store.clock()).load()
    assert reloaded.weekly_status == WeeklyStatus(week_key="2025-08", attended={"r1": {"c2": mark}})


def test_refresh_keeps_previous_state_when_reset_cannot_be_saved():
    storage = FlakyStorage({KEY: encode_app_data(_stored("2025-07"))})
    store = _store(storage)
    before = store.load()
    stored_blob = storage.get(KEY)
    store.clock.advance(days=3)
    storage.fail_writes = True

    with pytest.raises(StorageWriteError):
        store.refresh()
    with pytest.raises(StorageWriteError):
        store.data
    with pytest.raises(StorageWriteError):
        store.toggle_client_attended("r1", "c2")

    assert store._data is before
    assert storage.get(KEY) == stored_blob

    storage.fail_writes = False
    assert store.refresh().weekly_status == WeeklyStatus(week_key="2025-08", attended={})


def test_reset_leaves_client_text_exactly_as_stored():
    clients = [
        {
            "id": "c1",
            "name": "Ana",
            "phone": " 11 9999 ",
            "location": {"lat": -23.55, "lng": -46.63, "address": "Rua A "},
            "createdAt": "2025-01-02T10:00:00.000Z",
        }
    ]
    blob = json.dumps(
        {
            "clients": clients,
            "routes": [],
            "weeklyStatus": {"weekKey": "2025-06", "attended": {}},
        }
    )
    storage = InMemoryKeyValueStorage({KEY: blob})
    store = _store(storage)

    store.load()
    assert json.loads(storage.get(KEY))["clients"] == clients

    store.reset_week()
    assert json.loads(storage.get(KEY))["clients"] == clients
    assert store.data.clients[0].phone == " 11 9999 "
