import logging
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from config import Settings

logger = logging.getLogger(__name__)

GREETING = "<h1>Greetings from Dropstore.</h1>"


def verification_mail(token: str):
    return (
        "Verify your email address",
        f"{GREETING}<p>Thank you for registering your email in Dropstore. OTP to verify your account is {token}</p>",
    )


def reset_mail(token: str):
    return (
        "Reset your password",
        f"{GREETING}<p>OTP to reset your password is {token}</p>",
    )


def reset_done_mail():
    return (
        "Password reset successful",
        f"{GREETING}<p>Your password has been reset successfully.</p>",
    )


class Mailer:
    """SMTP mail transport.

    ``send`` blocks and raises on failure. ``dispatch`` runs ``send`` on a
    worker thread and returns the future; failures are only logged.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._pool = ThreadPoolExecutor(max_workers=settings.MAIL_WORKERS, thread_name_prefix="mail")

    def send(self, to: str, subject: str, html: str) -> None:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.MAIL_FROM
        message["To"] = to
        message.attach(MIMEText(html, "html"))

        with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT) as server:
            server.starttls()
            server.login(self.settings.EMAIL, self.settings.PASSWORD)
            server.sendmail(self.settings.MAIL_FROM, to, message.as_string())
        logger.info(f"Sent '{subject}' to {to}")

    def dispatch(self, to: str, subject: str, html: str) -> Future:
        future = self._pool.submit(self.send, to, subject, html)
        future.add_done_callback(lambda f: _log_failure(f, to, subject))
        return future

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)


def _log_failure(future: Future, to: str, subject: str) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error(f"Error sending '{subject}' to {to}: {exc}")
