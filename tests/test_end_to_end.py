from tests.conftest import auth, admin_headers, signup, create_package, book


def test_package_listing_to_revenue(client, mailer):
    """Seller lists, admin approves, tourist books, seller approves, revenue shows up"""
    tourist, tourist_token = signup(client, "a@example.com", name="Tourist A")
    seller, seller_token = signup(client, "b@example.com", role="seller", name="Seller B")

    package = create_package(client, seller_token, title="Package P", price="5000")
    assert package["status"] == "pending"

    approved = client.put(f"/api/admin/approve-package/{package['id']}", headers=admin_headers())
    assert approved.status_code == 200
    assert approved.json()["package"]["status"] == "approved"
    listed = client.get("/api/packages", params={"status": "approved"}).json()
    assert [p["id"] for p in listed] == [package["id"]]

    created = book(client, tourist_token, approved.json()["package"], tourist, guests=2, total_price=10000)
    assert created.status_code == 201
    booking = created.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["sellerId"] == seller["id"]

    pending = client.get(f"/api/bookings/seller/{seller['id']}/pending", headers=auth(seller_token)).json()
    assert [b["id"] for b in pending["bookings"]] == [booking["id"]]

    decided = client.patch(f"/api/bookings/approve/{booking['id']}", headers=auth(seller_token))
    assert decided.json()["booking"]["status"] == "approved"

    stats = client.get("/api/admin/stats", headers=admin_headers()).json()
    assert stats["totalRevenue"] == 10000
    assert stats["totalBookings"] == 1
    assert stats["activePackages"] == 1

    top = client.get("/api/admin/top-packages", headers=admin_headers()).json()
    assert top[0]["title"] == "Package P"
    assert top[0]["revenue"] == 10000

    assert mailer.subjects_for("a@example.com") == ["Booking Confirmation", "Booking Approved"]
    assert mailer.subjects_for("b@example.com") == ["New Booking Request"]
