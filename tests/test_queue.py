import random
import re
import threading
import uuid
from datetime import timedelta

import pytest

from app.core.errors import CodeGenerationError, InvalidTransitionError, NotFoundError, QueueConflictError
from app.models.queue_entry import QueueEntry, QueueStatus
from app.schemas.queue import QueueEntryCreate
from app.services import queue as queue_service
from app.services.queue import (
    auto_expire,
    call_entry,
    cancel_entry,
    clear_queue,
    generate_queue_code,
    join_queue,
    list_queue,
    lookup_by_code,
    mark_no_show,
    queue_stats,
    seat_entry,
)

CODE_SHAPE = re.compile(r"^[A-HJ-NP-Z]{3}[0-9]{3}$")


def party(phone="11987654321", name="Carla", size=2):
    return QueueEntryCreate(name=name, phone=phone, party_size=size)


def join_in_order(db, clock, count):
    entries = []
    for n in range(count):
        entries.append(join_queue(db, party(phone=f"1198765{n:04d}", name=f"Party {n}"), clock))
        clock.advance(minutes=1)
    return entries


# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------


def test_codes_are_three_letters_then_three_digits_without_i_or_o():
    rng = random.Random(7)
    for _ in range(1000):
        code = generate_queue_code(rng)
        assert CODE_SHAPE.match(code)
        assert "I" not in code and "O" not in code


def test_issued_codes_are_unique(db, clock):
    codes = {join_queue(db, party(phone=f"11{n:09d}"), clock).code for n in range(1000)}

    assert len(codes) == 1000


def test_code_collision_is_retried(db, clock):
    codes = iter(["KXA274", "KXA274", "MPR913"])
    join_queue(db, party(phone="11900000001"), clock, generate_code=lambda: next(codes))

    second = join_queue(db, party(phone="11900000002"), clock, generate_code=lambda: next(codes))

    assert second.code == "MPR913"


def test_code_generation_gives_up_after_max_attempts(db, clock):
    join_queue(db, party(phone="11900000001"), clock, generate_code=lambda: "KXA274")

    with pytest.raises(CodeGenerationError):
        join_queue(db, party(phone="11900000002"), clock, generate_code=lambda: "KXA274")


# ---------------------------------------------------------------------------
# Joining and positions
# ---------------------------------------------------------------------------


def test_first_entry_of_the_day_is_first_in_line(db, clock):
    entry = join_queue(db, party(), clock)

    assert entry.status == QueueStatus.WAITING
    assert entry.position == 1
    assert entry.people_ahead == 0


def test_positions_follow_join_order(db, clock):
    entries = join_in_order(db, clock, 3)

    assert [e.position for e in entries] == [1, 2, 3]


def test_rejoin_while_waiting_returns_existing_code_and_position(db, clock):
    join_in_order(db, clock, 2)
    mine = join_queue(db, party(phone="11912345678"), clock)

    with pytest.raises(QueueConflictError) as excinfo:
        join_queue(db, party(phone="11912345678", name="Someone Else"), clock)

    assert excinfo.value.code == mine.code
    assert excinfo.value.position == 3
    assert excinfo.value.to_dict()["code"] == mine.code


def test_phone_can_rejoin_once_no_longer_waiting(db, clock):
    first = join_queue(db, party(), clock)
    call_entry(db, first.id, clock)

    again = join_queue(db, party(), clock)

    assert again.code != first.code
    assert again.position == 1


def test_concurrent_joins_for_one_phone_yield_one_waiting_entry(session_factory, clock):
    attempts = 6
    barrier = threading.Barrier(attempts)
    created, conflicts = [], []

    def attempt():
        session = session_factory()
        try:
            barrier.wait()
            created.append(join_queue(session, party(), clock).code)
        except QueueConflictError as exc:
            conflicts.append(exc.code)
        finally:
            session.close()

    threads = [threading.Thread(target=attempt) for _ in range(attempts)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(created) == 1
    assert conflicts == created * (attempts - 1)

    session = session_factory()
    try:
        waiting = session.query(QueueEntry).filter(QueueEntry.status == QueueStatus.WAITING).count()
        assert waiting == 1
    finally:
        session.close()


def test_waiting_phone_index_turns_a_lost_race_into_a_rejoin(db, clock, monkeypatch):
    winner = join_queue(db, party(), clock)
    real_lookup = queue_service.waiting_entry_for_phone
    lookups = []

    # The first lookup misses the winner, as a join racing it would
    def stale_lookup(db, phone, clock):
        lookups.append(phone)
        if len(lookups) == 1:
            return None
        return real_lookup(db, phone, clock)

    monkeypatch.setattr(queue_service, "waiting_entry_for_phone", stale_lookup)

    with pytest.raises(QueueConflictError) as excinfo:
        join_queue(db, party(name="Carla again"), clock)

    assert excinfo.value.code == winner.code
    assert excinfo.value.position == 1
    assert db.query(QueueEntry).count() == 1


def test_waiting_entries_from_yesterday_do_not_block_a_rejoin(db, clock):
    join_queue(db, party(), clock)
    clock.advance(days=1)

    assert join_queue(db, party(), clock).position == 1


def test_positions_close_gaps_when_parties_leave(db, clock):
    first, second, third = join_in_order(db, clock, 3)

    call_entry(db, first.id, clock)
    cancel_entry(db, second.id)

    status = lookup_by_code(db, third.code, clock)
    assert status.position == 1
    assert status.people_ahead == 0
    assert status.message.startswith("You're next")


def test_lookup_is_case_insensitive_and_estimates_the_wait(db, clock):
    entries = join_in_order(db, clock, 3)

    status = lookup_by_code(db, entries[2].code.lower(), clock)

    assert status.position == 3
    assert status.people_ahead == 2
    assert status.estimated_wait_minutes == 20
    assert "number 3" in status.message


def test_lookup_of_a_non_waiting_entry_has_no_position(db, clock):
    entry = join_queue(db, party(), clock)
    call_entry(db, entry.id, clock)

    status = lookup_by_code(db, entry.code, clock)

    assert status.status == QueueStatus.CALLED
    assert status.position == 0
    assert status.estimated_wait_minutes is None


def test_lookup_of_an_unknown_code_is_not_found(db, clock):
    with pytest.raises(NotFoundError):
        lookup_by_code(db, "ZZZ999", clock)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def test_call_then_seat(db, clock):
    entry = join_queue(db, party(), clock)

    called = call_entry(db, entry.id, clock)
    assert called.status == QueueStatus.CALLED
    assert called.called_at == clock.now()

    clock.advance(minutes=3)
    seated = seat_entry(db, entry.id, clock)
    assert seated.status == QueueStatus.SEATED
    assert seated.seated_at == clock.now()


def test_call_then_no_show(db, clock):
    entry = join_queue(db, party(), clock)
    call_entry(db, entry.id, clock)

    assert mark_no_show(db, entry.id).status == QueueStatus.NO_SHOW


@pytest.mark.parametrize("action", [seat_entry, mark_no_show])
def test_waiting_entry_cannot_skip_the_call(db, clock, action):
    entry = join_queue(db, party(), clock)

    args = (db, entry.id, clock) if action is seat_entry else (db, entry.id)
    with pytest.raises(InvalidTransitionError):
        action(*args)


def test_finished_entries_are_terminal(db, clock):
    entry = join_queue(db, party(), clock)
    call_entry(db, entry.id, clock)
    seat_entry(db, entry.id, clock)

    with pytest.raises(InvalidTransitionError):
        cancel_entry(db, entry.id)
    with pytest.raises(InvalidTransitionError):
        call_entry(db, entry.id, clock)


def test_transition_on_missing_entry_is_not_found(db, clock):
    with pytest.raises(NotFoundError):
        call_entry(db, uuid.uuid4(), clock)


# ---------------------------------------------------------------------------
# Admin views and expiry
# ---------------------------------------------------------------------------


def test_list_puts_called_first_then_waiting_in_line(db, clock):
    first, second, third = join_in_order(db, clock, 3)
    call_entry(db, second.id, clock)
    cancel_entry(db, third.id)

    entries, total = list_queue(db, clock)

    assert total == 3
    assert [e.id for e in entries] == [second.id, first.id, third.id]
    assert [e.position for e in entries] == [0, 1, 0]

    waiting, total = list_queue(db, clock, status=QueueStatus.WAITING)
    assert total == 1
    assert waiting[0].id == first.id


def test_stats_count_today_by_status(db, clock):
    first, second, third = join_in_order(db, clock, 3)
    call_entry(db, first.id, clock)
    seat_entry(db, first.id, clock)
    call_entry(db, second.id, clock)

    stats = queue_stats(db, clock)

    assert (stats.waiting, stats.called, stats.seated) == (1, 1, 1)
    assert (stats.no_show, stats.cancelled, stats.expired) == (0, 0, 0)


def test_clear_expires_todays_active_entries(db, clock):
    first, second, third = join_in_order(db, clock, 3)
    call_entry(db, first.id, clock)
    seat_entry(db, first.id, clock)
    call_entry(db, second.id, clock)

    assert clear_queue(db, clock) == 2

    stats = queue_stats(db, clock)
    assert (stats.waiting, stats.called, stats.seated, stats.expired) == (0, 0, 1, 2)


def test_auto_expire_only_touches_earlier_days(db, clock):
    stale_waiting, stale_called, stale_seated = join_in_order(db, clock, 3)
    call_entry(db, stale_called.id, clock)
    call_entry(db, stale_seated.id, clock)
    seat_entry(db, stale_seated.id, clock)

    clock.current = clock.current.replace(hour=0, minute=5) + timedelta(days=1)
    today = join_queue(db, party(phone="11999999999"), clock)

    assert auto_expire(db, clock) == 2
    assert auto_expire(db, clock) == 0

    statuses = {e.id: e.status for e in db.query(QueueEntry).all()}
    assert statuses[stale_waiting.id] == QueueStatus.EXPIRED
    assert statuses[stale_called.id] == QueueStatus.EXPIRED
    assert statuses[stale_seated.id] == QueueStatus.SEATED
    assert statuses[today.id] == QueueStatus.WAITING


def test_yesterdays_waiting_entry_reads_as_expired_before_the_sweep(db, clock):
    entry = join_queue(db, party(), clock)
    clock.advance(days=1)

    status = lookup_by_code(db, entry.code, clock)

    assert status.status == QueueStatus.WAITING
    assert status.position == 0
    assert status.estimated_wait_minutes is None
    assert "expired" in status.message
