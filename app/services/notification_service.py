import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import Optional, Tuple

from app.core.logger import logger
from app.models.db_models import Booking


class Mailer(ABC):
    """Capability for sending one HTML email. Returns True on success."""

    @abstractmethod
    def send(self, to_email: str, subject: str, html: str) -> bool:
        ...



class NullMailer(Mailer):
    """Used when no mail account is configured."""

    def send(self, to_email: str, subject: str, html: str) -> bool:
        logger.info(f"ℹ️ Email disabled, not sending '{subject}' to {to_email}")
        return False


class SmtpMailer(Mailer):
    def __init__(self, server: str, port: int, username: str, password: str, sender_name: str = ""):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender_name = sender_name

    def send(self, to_email: str, subject: str, html: str) -> bool:
        """
        Sends an email using SMTP (e.g., Gmail) with STARTTLS.
        Returns: True if successful, False otherwise.
        """
        try:
            msg = MIMEMultipart()
            msg['From'] = formataddr((self.sender_name, self.username))
            msg['To'] = to_email
            msg['Subject'] = subject

            msg.attach(MIMEText(html, 'html'))

            server = smtplib.SMTP(self.server, self.port)
            try:
                server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.username, to_email, msg.as_string())
            finally:
                server.quit()

            logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send email to {to_email}: {e}")
            return False


class BookingNotifier:
    """Composes and sends the two emails that follow a new booking."""

    def __init__(self, mailer: Mailer, business_name: str, admin_email: Optional[str] = None):
        self.mailer = mailer
        self.business_name = business_name
        self.admin_email = admin_email

    def confirmation_email(self, booking: Booking) -> Tuple[str, str]:
        subject = f"Booking Confirmation - {self.business_name}"
        html = f"""
        <h2>Booking Confirmed</h2>
        <p>Hi {escape(booking.name)},</p>
        <p>Your {escape(booking.service)} booking for {escape(booking.date)} has been received.</p>
        <p>We will contact you shortly.</p>
        <br />
        <p>{escape(self.business_name)}</p>
        """
        return subject, html

    def admin_alert_email(self, booking: Booking) -> Tuple[str, str]:
        subject = "New Booking Received"
        html = f"""
        <h3>New Booking</h3>
        <p><strong>Name:</strong> {escape(booking.name)}</p>
        <p><strong>Email:</strong> {escape(booking.email)}</p>
        <p><strong>Phone:</strong> {escape(booking.phone)}</p>
        <p><strong>Service:</strong> {escape(booking.service)}</p>
        <p><strong>Date:</strong> {escape(booking.date)}</p>
        <p><strong>Car model:</strong> {escape(booking.car_model or "")}</p>
        <p><strong>Message:</strong> {escape(booking.message or "N/A")}</p>
        """
        return subject, html

    def notify_booking_created(self, booking: Booking) -> None:
        """Customer confirmation first, then the admin alert. Never raises."""
        try:
            subject, html = self.confirmation_email(booking)
            if not self.mailer.send(booking.email, subject, html):
                logger.warning(f"⚠️ Confirmation email for booking {booking.id} was not sent")
        except Exception as e:
            logger.error(f"❌ Error sending confirmation for booking {booking.id}: {e}")

        if not self.admin_email:
            logger.warning("⚠️ ADMIN_EMAIL not set, skipping admin alert")
            return

        try:
            subject, html = self.admin_alert_email(booking)
            if not self.mailer.send(self.admin_email, subject, html):
                logger.warning(f"⚠️ Admin alert for booking {booking.id} was not sent")
        except Exception as e:
            logger.error(f"❌ Error sending admin alert for booking {booking.id}: {e}")
