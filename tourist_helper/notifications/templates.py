"""Booking notification emails.

Each builder reads everything it needs from the booking up front and returns
plain `OutgoingEmail` values, so they can be delivered after the request's
database session has closed.
"""

from html import escape
from typing import List, NamedTuple, Optional

from tourist_helper.models import Booking


class OutgoingEmail(NamedTuple):
    to: str
    subject: str
    html: str


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def _package_title(booking: Booking) -> str:
    return escape(booking.package.title) if booking.package else "your package"


def booking_created_emails(booking: Booking) -> List[OutgoingEmail]:
    """Tourist confirmation plus the seller's new-booking alert"""
    emails = []
    tourist = booking.tourist
    seller = booking.seller
    title = _package_title(booking)
    travel_date = _format_date(booking.travel_date)

    if tourist and tourist.email:
        emails.append(OutgoingEmail(
            to=tourist.email,
            subject="Booking Confirmation",
            html=(
                f"<h2>Hi {escape(tourist.name)},</h2>"
                f"<p>Your booking for <b>{title}</b> has been received!</p>"
                f"<p>Travel Date: {travel_date}</p>"
                f"<p>Guests: {booking.guests}</p>"
                f"<p>Total Price: ₹{booking.total_price:.2f}</p>"
                "<p>Status: Pending seller approval</p>"
            ),
        ))

    if seller and seller.email:
        tourist_line = (
            f"{escape(tourist.name)} ({escape(tourist.email)}, {escape(tourist.phone or '')})"
            if tourist else "-"
        )
        emails.append(OutgoingEmail(
            to=seller.email,
            subject="New Booking Request",
            html=(
                f"<h2>Hi {escape(seller.agency_name or seller.name)},</h2>"
                f"<p>You have a new booking request for <b>{title}</b>.</p>"
                f"<p>Tourist: {tourist_line}</p>"
                f"<p>Guests: {booking.guests}</p>"
                f"<p>Travel Date: {travel_date}</p>"
                "<p>Please login to approve or reject the booking.</p>"
            ),
        ))

    return emails


def booking_approved_email(booking: Booking) -> Optional[OutgoingEmail]:
    tourist = booking.tourist
    if not tourist or not tourist.email:
        return None
    return OutgoingEmail(
        to=tourist.email,
        subject="Booking Approved",
        html=(
            f"<h2>Hi {escape(tourist.name)},</h2>"
            f"<p>Your booking for <b>{_package_title(booking)}</b> has been "
            '<span style="color:green">Approved</span>.</p>'
            "<p>We look forward to hosting you!</p>"
        ),
    )


def booking_rejected_email(booking: Booking) -> Optional[OutgoingEmail]:
    tourist = booking.tourist
    if not tourist or not tourist.email:
        return None
    return OutgoingEmail(
        to=tourist.email,
        subject="Booking Rejected",
        html=(
            f"<h2>Hi {escape(tourist.name)},</h2>"
            f"<p>Sorry, your booking for <b>{_package_title(booking)}</b> has been "
            '<span style="color:red">Rejected</span>.</p>'
            "<p>Please try another package or date.</p>"
        ),
    )


def booking_cancelled_email(booking: Booking) -> Optional[OutgoingEmail]:
    seller = booking.seller
    if not seller or not seller.email:
        return None
    tourist_name = escape(booking.tourist.name) if booking.tourist else "A tourist"
    return OutgoingEmail(
        to=seller.email,
        subject="Booking Cancelled",
        html=(
            f"<h2>Hi {escape(seller.agency_name or seller.name)},</h2>"
            f"<p>{tourist_name} cancelled the booking for <b>{_package_title(booking)}</b> "
            f"on {_format_date(booking.travel_date)}.</p>"
        ),
    )
