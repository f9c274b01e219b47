import smtplib
import unittest
from unittest.mock import patch

from portfolio_api.db import ContactRecord
from portfolio_api.notify import SmtpNotifier, build_contact_email


def contact():
    return ContactRecord(
        contact_id="c1",
        name="Grace Hopper",
        email="grace@example.com",
        subject="Hello there",
        message="I would like to talk about compilers.",
    )


class SmtpNotifierTests(unittest.TestCase):
    def test_build_contact_email(self):
        msg = build_contact_email(contact(), "bot@example.com", "owner@example.com")
        self.assertEqual(msg["Subject"], "Portfolio Contact: Hello there")
        self.assertEqual(msg["Reply-To"], "grace@example.com")
        self.assertIn("I would like to talk about compilers.", msg.as_string())

    @patch("portfolio_api.notify.smtplib.SMTP_SSL")
    def test_sends_over_ssl(self, smtp_ssl):
        server = smtp_ssl.return_value.__enter__.return_value
        notifier = SmtpNotifier(
            host="smtp.example.com",
            port=465,
            recipient="owner@example.com",
            username="bot@example.com",
            password="secret",
        )

        self.assertTrue(notifier.notify_contact(contact()))
        smtp_ssl.assert_called_once_with("smtp.example.com", 465, timeout=10.0)
        server.login.assert_called_once_with("bot@example.com", "secret")
        sender, recipients, body = server.sendmail.call_args[0]
        self.assertEqual(sender, "bot@example.com")
        self.assertEqual(recipients, ["owner@example.com"])
        self.assertIn("Grace Hopper", body)

    @patch("portfolio_api.notify.smtplib.SMTP")
    def test_starttls_without_credentials(self, smtp):
        server = smtp.return_value.__enter__.return_value
        notifier = SmtpNotifier(
            host="localhost", port=25, recipient="owner@example.com", use_ssl=False
        )

        self.assertTrue(notifier.notify_contact(contact()))
        smtp.return_value.starttls.assert_called_once_with()
        server.login.assert_not_called()
        self.assertEqual(server.sendmail.call_args[0][0], "owner@example.com")

    @patch("portfolio_api.notify.smtplib.SMTP_SSL")
    def test_failure_is_reported_not_raised(self, smtp_ssl):
        smtp_ssl.side_effect = smtplib.SMTPConnectError(421, b"busy")
        notifier = SmtpNotifier(host="smtp.example.com", port=465, recipient="owner@example.com")

        with self.assertLogs("portfolio_api.notify", level="ERROR"):
            self.assertFalse(notifier.notify_contact(contact()))


if __name__ == "__main__":
    unittest.main()
