import pytest
from sqlalchemy import func

from boxoffice.core.exceptions import CapacityError, NotFoundError, PerPersonLimitError, ValidationError
from boxoffice.models.reservation import Reservation

from conftest import at


@pytest.fixture
def showing(showing_factory):
    return showing_factory(at(10))


def _fill(booking_engine, showing_id, tickets):
    """Book ``tickets`` seats spread over anonymous guests, at most 8 each."""
    i = 0
    while tickets > 0:
        n = min(8, tickets)
        booking_engine.create_or_merge_reservation(showing_id, f"Guest {i}", n)
        tickets -= n
        i += 1


# ---------------------------------------------------------------------------
# Create / merge
# ---------------------------------------------------------------------------


def test_new_claimant_creates_a_record(booking_engine, showing):
    outcome = booking_engine.create_or_merge_reservation(showing.id, "Ann", 8)

    assert outcome.status == "created"
    assert outcome.tickets == 8
    assert outcome.showing_id == showing.id


def test_per_person_cap_scenario(booking_engine, showing):
    booking_engine.create_or_merge_reservation(showing.id, "Ann", 8)

    with pytest.raises(PerPersonLimitError) as exc:
        booking_engine.create_or_merge_reservation(showing.id, "Ann", 3)
    assert exc.value.reason == "perPersonCap"
    assert exc.value.limit == 8
    assert exc.value.attempted == 11

    assert booking_engine.get_showing_detail(showing.id).booked_tickets == 8


def test_single_request_above_cap(booking_engine, showing):
    with pytest.raises(PerPersonLimitError) as exc:
        booking_engine.create_or_merge_reservation(showing.id, "Ann", 9)
    assert exc.value.attempted == 9


def test_capacity_scenario(booking_engine, showing):
    _fill(booking_engine, showing.id, 48)

    with pytest.raises(CapacityError) as exc:
        booking_engine.create_or_merge_reservation(showing.id, "Bob", 3)
    assert exc.value.context == {"capacity": 50, "booked": 48, "requested": 3}

    booking_engine.create_or_merge_reservation(showing.id, "Bob", 2)
    assert booking_engine.get_showing_detail(showing.id).booked_tickets == 50


def test_repeat_claimant_merges_into_existing_record(db, booking_engine, showing):
    first = booking_engine.create_or_merge_reservation(showing.id, "Ann", 3)
    second = booking_engine.create_or_merge_reservation(showing.id, "  Ann ", 4)

    assert second.status == "merged"
    assert second.reservation_id == first.reservation_id
    assert second.tickets == 7
    assert db.query(Reservation).count() == 1


def test_merge_yields_same_state_as_single_booking(booking_engine, showing_factory):
    merged = showing_factory(at(10), room_id="A")
    single = showing_factory(at(10), room_id="C")

    booking_engine.create_or_merge_reservation(merged.id, "Ann", 2)
    booking_engine.create_or_merge_reservation(merged.id, "Ann", 3)
    booking_engine.create_or_merge_reservation(merged.id, "Ann", 1)
    booking_engine.create_or_merge_reservation(single.id, "Ann", 6)

    a = booking_engine.get_showing_detail(merged.id)
    b = booking_engine.get_showing_detail(single.id)
    assert [(r.customer_name, r.tickets) for r in a.reservations] == [(r.customer_name, r.tickets) for r in b.reservations]
    assert a.booked_tickets == b.booked_tickets == 6


def test_merge_checks_capacity_without_double_counting(booking_engine, showing):
    _fill(booking_engine, showing.id, 44)
    booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)

    outcome = booking_engine.create_or_merge_reservation(showing.id, "Ann", 4)
    assert outcome.tickets == 6

    with pytest.raises(CapacityError):
        booking_engine.create_or_merge_reservation(showing.id, "Ann", 1)


def test_names_are_case_sensitive(db, booking_engine, showing):
    booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)
    outcome = booking_engine.create_or_merge_reservation(showing.id, "ann", 2)

    assert outcome.status == "created"
    assert db.query(Reservation).count() == 2


@pytest.mark.parametrize(
    "name, tickets, field",
    [
        ("", 1, "customer_name"),
        ("   ", 1, "customer_name"),
        (None, 1, "customer_name"),
        ("Ann", 0, "tickets"),
        ("Ann", -2, "tickets"),
        ("Ann", 1.5, "tickets"),
        ("Ann", "2", "tickets"),
    ],
)
def test_create_rejects_bad_fields(booking_engine, showing, name, tickets, field):
    with pytest.raises(ValidationError) as exc:
        booking_engine.create_or_merge_reservation(showing.id, name, tickets)
    assert exc.value.field == field


def test_create_for_missing_showing(booking_engine):
    with pytest.raises(NotFoundError):
        booking_engine.create_or_merge_reservation("6f1c1a0e-8a43-4d3e-9e0b-0f7a3f0c2b11", "Ann", 1)


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------


def test_edit_in_place(booking_engine, showing):
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)

    outcome = booking_engine.edit_reservation(ann.reservation_id, "Anna", 5)

    assert outcome.status == "updated"
    assert outcome.reservation_id == ann.reservation_id
    [reservation] = booking_engine.list_reservations(showing.id)
    assert (reservation.customer_name, reservation.tickets) == ("Anna", 5)


def test_edit_excludes_itself_from_capacity(booking_engine, showing):
    _fill(booking_engine, showing.id, 42)
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 8)

    # Full house, yet Ann can still shrink and regrow the same record
    booking_engine.edit_reservation(ann.reservation_id, "Ann", 8)
    booking_engine.edit_reservation(ann.reservation_id, "Ann", 1)
    booking_engine.edit_reservation(ann.reservation_id, "Ann", 8)


def test_edit_above_capacity(booking_engine, showing):
    _fill(booking_engine, showing.id, 45)
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)

    with pytest.raises(CapacityError):
        booking_engine.edit_reservation(ann.reservation_id, "Ann", 6)


def test_edit_above_cap(booking_engine, showing):
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)
    with pytest.raises(PerPersonLimitError):
        booking_engine.edit_reservation(ann.reservation_id, "Ann", 9)


def test_edit_rename_onto_other_claimant_merges(db, booking_engine, showing):
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 3)
    bob = booking_engine.create_or_merge_reservation(showing.id, "Bob", 2)

    outcome = booking_engine.edit_reservation(bob.reservation_id, "Ann", 4)

    assert outcome.status == "merged"
    assert outcome.reservation_id == ann.reservation_id
    assert outcome.deleted_id == bob.reservation_id
    assert outcome.tickets == 7
    assert db.get(Reservation, bob.reservation_id) is None
    assert db.get(Reservation, ann.reservation_id).tickets == 7


def test_edit_merge_respects_cap_and_leaves_both_records(db, booking_engine, showing):
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 5)
    bob = booking_engine.create_or_merge_reservation(showing.id, "Bob", 4)

    with pytest.raises(PerPersonLimitError) as exc:
        booking_engine.edit_reservation(bob.reservation_id, "Ann", 4)
    assert exc.value.attempted == 9

    names = {r.customer_name: r.tickets for r in booking_engine.list_reservations(showing.id)}
    assert names == {"Ann": 5, "Bob": 4}


def test_edit_merge_capacity_excludes_both_records(booking_engine, showing):
    _fill(booking_engine, showing.id, 40)
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 4)
    bob = booking_engine.create_or_merge_reservation(showing.id, "Bob", 4)
    booking_engine.create_or_merge_reservation(showing.id, "Carl", 2)

    # 40 + 2 others, merged Ann 4 + 4 = 8 -> 50
    outcome = booking_engine.edit_reservation(bob.reservation_id, "Ann", 4)
    assert outcome.tickets == 8
    assert booking_engine.get_showing_detail(showing.id).booked_tickets == 50
    assert outcome.reservation_id == ann.reservation_id


def test_edit_scoped_to_wrong_showing(booking_engine, showing, showing_factory):
    other = showing_factory(at(10), room_id="C")
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)

    with pytest.raises(NotFoundError):
        booking_engine.edit_reservation(ann.reservation_id, "Ann", 3, showing_id=other.id)


def test_edit_missing_reservation(booking_engine):
    with pytest.raises(NotFoundError):
        booking_engine.edit_reservation("6f1c1a0e-8a43-4d3e-9e0b-0f7a3f0c2b11", "Ann", 1)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


def test_delete_reservation(db, booking_engine, showing):
    ann = booking_engine.create_or_merge_reservation(showing.id, "Ann", 2)

    booking_engine.delete_reservation(ann.reservation_id, showing_id=showing.id)

    assert db.query(Reservation).count() == 0
    with pytest.raises(NotFoundError):
        booking_engine.delete_reservation(ann.reservation_id)


def test_list_reservations_for_missing_showing(booking_engine):
    with pytest.raises(NotFoundError):
        booking_engine.list_reservations("6f1c1a0e-8a43-4d3e-9e0b-0f7a3f0c2b11")


# ---------------------------------------------------------------------------
# Conservation across a mixed sequence
# ---------------------------------------------------------------------------


def test_invariants_hold_after_every_operation(db, booking_engine, config, showing_factory):
    x = showing_factory(at(10), room_id="B")   # capacity 10
    y = showing_factory(at(14), room_id="B")
    ops = [
        lambda: booking_engine.create_or_merge_reservation(x.id, "Ann", 6),
        lambda: booking_engine.create_or_merge_reservation(x.id, "Ann", 3),
        lambda: booking_engine.create_or_merge_reservation(x.id, "Bob", 4),
        lambda: booking_engine.create_or_merge_reservation(x.id, "Carl", 1),
        lambda: booking_engine.create_or_merge_reservation(y.id, "Ann", 5),
        lambda: booking_engine.create_or_merge_reservation(x.id, "Ann", 2),
        lambda: booking_engine.create_or_merge_reservation(y.id, "Dan", 6),
    ]
    for op in ops:
        try:
            op()
        except (CapacityError, PerPersonLimitError):
            pass

        per_showing = dict(
            db.query(Reservation.showing_id, func.sum(Reservation.tickets))
            .group_by(Reservation.showing_id)
            .all()
        )
        assert all(total <= 10 for total in per_showing.values())
        assert all(r.tickets <= config.max_tickets_per_person for r in db.query(Reservation).all())
