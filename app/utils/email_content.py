"""Subjects and bodies for notification emails."""

from datetime import UTC, datetime
from html import escape

from app.config import settings
from app.models.booking import ActiveJob, CompletedJob


def _format_time(value: datetime) -> str:
    return value.strftime("%d %b %Y %H:%M")


def _trip_lines(job: ActiveJob | CompletedJob) -> list[tuple[str, str]]:
    return [
        ("Pickup", job.pickup),
        ("Dropoff", job.dropoff),
        ("Pickup Time", _format_time(job.pickup_time)),
        ("Vehicle Type", job.vehicle_type),
    ]


def _render(title: str, rows: list[tuple[str, str]], footer: str | None = None) -> tuple[str, str]:
    """Render ``(text, html)`` for a titled list of label/value rows."""
    text = "\n".join([title, ""] + [f"{label}: {value}" for label, value in rows])
    if footer:
        text = f"{text}\n\n{footer}"

    html_rows = "".join(
        f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>" for label, value in rows
    )
    html_footer = f"<p>{escape(footer)}</p>" if footer else ""
    html = f"""
        <!DOCTYPE html>
        <html>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                     max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
            <h2>{escape(title)}</h2>
            {html_rows}
            {html_footer}
            <p style="color: #9ca3af; font-size: 12px; margin-top: 24px; text-align: center;">
                &copy; {datetime.now(UTC).year} {escape(settings.email_from_name)}
            </p>
        </body>
        </html>
        """
    return text, html


def booking_received(job: ActiveJob) -> tuple[str, str, str]:
    """Operations notice for a newly paid booking."""
    rows = [
        ("Booking", job.id),
        ("Name", job.customer_name),
        ("Email", job.customer_email),
        ("Phone", job.customer_phone or "-"),
        *_trip_lines(job),
        ("Total Fare", f"${job.fare}"),
        ("Distance", f"{job.distance_km} km" if job.distance_km is not None else "-"),
        ("Estimated Time", f"{job.duration_min} min" if job.duration_min is not None else "-"),
        ("Notes", job.notes or "None"),
    ]
    text, html = _render("New Chauffeur Booking", rows)
    return f"New Booking from {job.customer_name}", text, html


def booking_confirmation(job: ActiveJob) -> tuple[str, str, str]:
    """Customer receipt for a paid booking."""
    rows = [("Booking", job.id), *_trip_lines(job), ("Total Paid", f"${job.fare}")]
    text, html = _render(
        "Your booking is confirmed",
        rows,
        footer="We will let you know once a chauffeur has been assigned.",
    )
    return f"{settings.email_from_name} booking {job.id}", text, html


def job_assigned(job: ActiveJob) -> tuple[str, str, str]:
    """Driver notice for a job assignment."""
    rows = [
        *_trip_lines(job),
        ("Customer", job.customer_name),
        ("Customer Phone", job.customer_phone or "-"),
        ("Notes", job.notes or "None"),
        ("Your Pay", f"${job.driver_payout}"),
    ]
    text, html = _render(
        "You have been assigned a new job",
        rows,
        footer="Please log in to your driver portal to confirm.",
    )
    return "New Job Assigned", text, html


def driver_response(job: ActiveJob, driver_email: str, confirmed: bool) -> tuple[str, str, str]:
    """Operations notice for a driver's accept/refuse."""
    outcome = "confirmed" if confirmed else "refused"
    rows = [("Booking", job.id), ("Driver", driver_email), *_trip_lines(job)]
    footer = None if confirmed else "The job is back in the pending list."
    text, html = _render(f"Driver {outcome} job {job.id}", rows, footer=footer)
    return f"Job {job.id} {outcome} by {driver_email}", text, html


def job_completed(job: CompletedJob) -> tuple[str, str, str]:
    """Operations notice for a completed trip."""
    rows = [
        ("Booking", job.id),
        ("Driver", job.assigned_driver or "-"),
        *_trip_lines(job),
        ("Fare", f"${job.fare}"),
        ("Driver Pay", f"${job.driver_payout}"),
        ("Completed At", _format_time(job.completed_at)),
    ]
    text, html = _render(f"Job {job.id} completed", rows)
    return f"Job {job.id} completed", text, html
