from datetime import datetime, timezone

import pytest

from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.bookings import BookingService, TRANSITIONS
from tourist_helper.exceptions import InvalidTransitionError
from tourist_helper.models import BookingStatus
from tests.conftest import auth, admin_headers, signup, create_package, book


def test_tourist_creates_pending_booking_and_both_parties_are_emailed(client, marketplace, mailer):
    tourist, seller, package = marketplace["tourist"], marketplace["seller"], marketplace["package"]

    resp = book(client, marketplace["tourist_token"], package, tourist, guests=2)

    assert resp.status_code == 201
    booking = resp.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["guests"] == 2
    assert booking["totalPrice"] == 10000
    assert booking["package"]["title"] == package["title"]
    assert booking["tourist"]["email"] == tourist["email"]
    assert booking["seller"]["agencyName"] == "Bob Tours"
    assert mailer.subjects_for(tourist["email"]) == ["Booking Confirmation"]
    assert mailer.subjects_for(seller["email"]) == ["New Booking Request"]


def test_travel_date_defaults_to_now(client, marketplace):
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    resp = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"],
                travelDate=None)

    assert resp.status_code == 201
    travel_date = datetime.fromisoformat(resp.json()["booking"]["travelDate"].replace("Z", "+00:00"))
    assert travel_date.replace(tzinfo=None) >= before.replace(microsecond=0)


@pytest.mark.parametrize("missing", ["packageId", "touristId", "sellerId", "totalPrice"])
def test_missing_required_fields_are_rejected(client, marketplace, missing):
    package, tourist = marketplace["package"], marketplace["tourist"]
    payload = {
        "packageId": package["id"],
        "touristId": tourist["id"],
        "sellerId": package["createdBy"],
        "totalPrice": 5000,
    }
    del payload[missing]

    resp = client.post("/api/bookings", json=payload, headers=auth(marketplace["tourist_token"]))

    assert resp.status_code == 400


@pytest.mark.parametrize("guests", [0, -1])
def test_guests_below_one_are_rejected(client, marketplace, guests):
    resp = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"],
                guests=guests, total_price=5000)
    assert resp.status_code == 400


def test_seller_must_own_the_package(client, marketplace):
    other_seller, _ = signup(client, "mallory@example.com", role="seller")

    resp = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"],
                sellerId=other_seller["id"])

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Seller does not own this package"


def test_unapproved_or_missing_package_cannot_be_booked(client, marketplace):
    pending = create_package(client, marketplace["seller_token"], title="Not yet")

    unapproved = book(client, marketplace["tourist_token"], pending, marketplace["tourist"])
    missing = book(client, marketplace["tourist_token"], dict(pending, id=9999), marketplace["tourist"])

    assert unapproved.status_code == 400
    assert missing.status_code == 404


def test_cannot_book_on_behalf_of_another_tourist(client, marketplace):
    _, other_token = signup(client, "trudy@example.com")

    resp = book(client, other_token, marketplace["package"], marketplace["tourist"])

    assert resp.status_code == 403


def test_booking_requires_authentication(client, marketplace):
    resp = client.post("/api/bookings", json={
        "packageId": marketplace["package"]["id"],
        "touristId": marketplace["tourist"]["id"],
        "sellerId": marketplace["seller"]["id"],
        "totalPrice": 5000,
    })
    assert resp.status_code == 401


def test_email_failure_does_not_fail_booking(client, marketplace, mailer):
    mailer.fail = True

    resp = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"])

    assert resp.status_code == 201
    assert len(mailer.sent) == 2


def test_seller_approves_pending_booking(client, marketplace, mailer):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]

    resp = client.patch(f"/api/bookings/approve/{booking['id']}", headers=auth(marketplace["seller_token"]))

    assert resp.status_code == 200
    assert resp.json()["message"] == "Booking approved"
    assert resp.json()["booking"]["status"] == "approved"
    assert mailer.subjects_for(marketplace["tourist"]["email"])[-1] == "Booking Approved"


def test_seller_rejects_pending_booking(client, marketplace, mailer):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]

    resp = client.patch(f"/api/bookings/reject/{booking['id']}", headers=auth(marketplace["seller_token"]))

    assert resp.status_code == 200
    assert resp.json()["booking"]["status"] == "rejected"
    assert mailer.subjects_for(marketplace["tourist"]["email"])[-1] == "Booking Rejected"


def test_only_pending_bookings_can_be_decided(client, marketplace, mailer):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    seller_headers = auth(marketplace["seller_token"])
    client.patch(f"/api/bookings/reject/{booking['id']}", headers=seller_headers)
    sent_before = len(mailer.sent)

    approve_rejected = client.patch(f"/api/bookings/approve/{booking['id']}", headers=seller_headers)
    reject_again = client.patch(f"/api/bookings/reject/{booking['id']}", headers=seller_headers)

    assert approve_rejected.status_code == 400
    assert reject_again.status_code == 400
    assert client.get(f"/api/bookings/{booking['id']}", headers=seller_headers).json()["status"] == "rejected"
    assert len(mailer.sent) == sent_before


def test_double_approval_is_refused(client, marketplace):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    seller_headers = auth(marketplace["seller_token"])

    assert client.patch(f"/api/bookings/approve/{booking['id']}", headers=seller_headers).status_code == 200
    assert client.patch(f"/api/bookings/approve/{booking['id']}", headers=seller_headers).status_code == 400


def test_only_the_bookings_seller_decides(client, marketplace):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    _, other_seller_token = signup(client, "oscar@example.com", role="seller")

    by_tourist = client.patch(f"/api/bookings/approve/{booking['id']}", headers=auth(marketplace["tourist_token"]))
    by_other = client.patch(f"/api/bookings/approve/{booking['id']}", headers=auth(other_seller_token))
    by_admin = client.patch(f"/api/bookings/approve/{booking['id']}", headers=admin_headers())

    assert by_tourist.status_code == 403
    assert by_other.status_code == 403
    assert by_admin.status_code == 200


def test_deciding_a_missing_booking_is_404(client, marketplace):
    headers = auth(marketplace["seller_token"])
    assert client.patch("/api/bookings/approve/9999", headers=headers).status_code == 404
    assert client.patch("/api/bookings/reject/9999", headers=headers).status_code == 404


def test_tourist_cancels_booking_and_seller_is_told(client, marketplace, mailer):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    client.patch(f"/api/bookings/approve/{booking['id']}", headers=auth(marketplace["seller_token"]))

    by_seller = client.patch(f"/api/bookings/cancel/{booking['id']}", headers=auth(marketplace["seller_token"]))
    by_tourist = client.patch(f"/api/bookings/cancel/{booking['id']}", headers=auth(marketplace["tourist_token"]))
    again = client.patch(f"/api/bookings/cancel/{booking['id']}", headers=auth(marketplace["tourist_token"]))

    assert by_seller.status_code == 403
    assert by_tourist.status_code == 200
    assert by_tourist.json()["booking"]["status"] == "cancelled"
    assert again.status_code == 400
    assert mailer.subjects_for(marketplace["seller"]["email"])[-1] == "Booking Cancelled"


def test_list_bookings_by_party_and_pending(client, marketplace):
    tourist_token, seller_token = marketplace["tourist_token"], marketplace["seller_token"]
    first = book(client, tourist_token, marketplace["package"], marketplace["tourist"]).json()["booking"]
    book(client, tourist_token, marketplace["package"], marketplace["tourist"], guests=3)
    client.patch(f"/api/bookings/approve/{first['id']}", headers=auth(seller_token))
    seller_id, tourist_id = marketplace["seller"]["id"], marketplace["tourist"]["id"]

    by_seller = client.get(f"/api/bookings/seller/{seller_id}", headers=auth(seller_token)).json()["bookings"]
    pending = client.get(f"/api/bookings/seller/{seller_id}/pending", headers=auth(seller_token)).json()["bookings"]
    by_tourist = client.get(f"/api/bookings/tourist/{tourist_id}", headers=auth(tourist_token)).json()["bookings"]
    everything = client.get("/api/bookings", headers=admin_headers()).json()["bookings"]

    assert len(by_seller) == 2
    assert [b["guests"] for b in pending] == [3]
    assert len(by_tourist) == 2
    assert len(everything) == 2
    assert all(b["package"] and b["tourist"] and b["seller"] for b in everything)


def test_booking_lists_are_private(client, marketplace):
    _, stranger_token = signup(client, "stranger@example.com")
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    headers = auth(stranger_token)

    assert client.get("/api/bookings", headers=headers).status_code == 403
    assert client.get(f"/api/bookings/seller/{marketplace['seller']['id']}", headers=headers).status_code == 403
    assert client.get(f"/api/bookings/tourist/{marketplace['tourist']['id']}", headers=headers).status_code == 403
    assert client.get(f"/api/bookings/{booking['id']}", headers=headers).status_code == 403
    assert client.get("/api/bookings/9999", headers=admin_headers()).status_code == 404


def test_transition_table_has_no_way_out_of_final_states():
    for final in (BookingStatus.REJECTED, BookingStatus.CANCELLED, BookingStatus.COMPLETED):
        assert TRANSITIONS[final] == set()
    assert BookingStatus.COMPLETED not in set().union(*TRANSITIONS.values())


def test_only_tourist_accounts_can_be_the_booking_party(client, marketplace):
    seller = marketplace["seller"]

    resp = book(client, marketplace["seller_token"], marketplace["package"], seller)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Only tourist accounts can book packages"
    assert client.get("/api/admin/top-packages", headers=admin_headers()).json() == []


def test_decision_on_a_stale_booking_does_not_overwrite_a_newer_one(client, marketplace, db_session):
    booking = book(client, marketplace["tourist_token"], marketplace["package"], marketplace["tourist"]).json()["booking"]
    service = BookingService(db_session)
    stale = service.get_booking(booking["id"])
    assert stale.status == "pending"

    # Another request rejects it while this session still holds the pending copy
    client.patch(f"/api/bookings/reject/{booking['id']}", headers=auth(marketplace["seller_token"]))
    admin = CurrentUser(email="admin@example.com", name="System Admin", role="admin")

    with pytest.raises(InvalidTransitionError):
        service.approve_booking(booking["id"], admin)

    db_session.expire_all()
    assert service.get_booking(booking["id"]).status == "rejected"
