import smtplib
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from app.models.db_models import Booking
from app.services.notification_service import BookingNotifier, NullMailer, SmtpMailer
from tests.conftest import RecordingMailer


def make_booking(**overrides):
    fields = dict(
        id="5f2c1a9e-8c1b-4c55-9d2a-0d3c7b7f1e11",
        name="Ana",
        email="a@x.com",
        phone="555",
        service="Oil Change",
        date="2024-05-01",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Booking(**fields)


# Test Email (Mocked)
@patch("app.services.notification_service.smtplib.SMTP")
def test_smtp_mailer_sends(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    mailer = SmtpMailer("smtp.test", 587, "user@test.com", "pass", sender_name="Nova's Auto Center")
    result = mailer.send("client@test.com", "Test Subject", "<p>Hi</p>")

    assert result is True
    mock_smtp_cls.assert_called_once_with("smtp.test", 587)
    mock_server.starttls.assert_called_once()
    mock_server.login.assert_called_with("user@test.com", "pass")
    mock_server.sendmail.assert_called_once()
    sender, recipient, body = mock_server.sendmail.call_args[0]
    assert sender == "user@test.com"
    assert recipient == "client@test.com"
    assert "Subject: Test Subject" in body
    mock_server.quit.assert_called_once()

@patch("app.services.notification_service.smtplib.SMTP")
def test_smtp_mailer_reports_failure(mock_smtp_cls):
    mock_server = MagicMock()
    mock_server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    mock_smtp_cls.return_value = mock_server

    mailer = SmtpMailer("smtp.test", 587, "user@test.com", "wrong")
    assert mailer.send("client@test.com", "Subject", "<p>Hi</p>") is False
    mock_server.sendmail.assert_not_called()
    mock_server.quit.assert_called_once()

def test_null_mailer():
    assert NullMailer().send("client@test.com", "Subject", "body") is False

def test_notifier_sends_confirmation_then_alert():
    mailer = RecordingMailer()
    notifier = BookingNotifier(mailer, "Nova's Auto Center", "owner@nova.test")

    notifier.notify_booking_created(make_booking(message="Rattling noise"))

    (to1, subject1, html1), (to2, subject2, html2) = mailer.sent
    assert to1 == "a@x.com"
    assert subject1 == "Booking Confirmation - Nova's Auto Center"
    assert "Oil Change" in html1 and "2024-05-01" in html1
    assert to2 == "owner@nova.test"
    assert subject2 == "New Booking Received"
    assert "Rattling noise" in html2

def test_admin_alert_defaults():
    notifier = BookingNotifier(RecordingMailer(), "Nova", "owner@nova.test")
    _, html = notifier.admin_alert_email(make_booking())
    assert "N/A" in html
    assert "Not specified" in html

def test_user_input_is_escaped():
    notifier = BookingNotifier(RecordingMailer(), "Nova", "owner@nova.test")
    _, html = notifier.confirmation_email(make_booking(name="<script>x</script>"))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html

def test_admin_alert_skipped_without_address():
    mailer = RecordingMailer()
    BookingNotifier(mailer, "Nova", "").notify_booking_created(make_booking())
    assert [to for to, _, _ in mailer.sent] == ["a@x.com"]

def test_notifier_swallows_mailer_errors():
    # Must not raise: it runs as a background task after the response
    BookingNotifier(RecordingMailer(fail=True), "Nova", "owner@nova.test").notify_booking_created(make_booking())

def test_mailer_is_abstract():
    import pytest
    from app.services.notification_service import Mailer

    with pytest.raises(TypeError):
        Mailer()
