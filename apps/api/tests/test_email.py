import smtplib
from unittest.mock import patch

from hrportal.services.email import SmtpEmailSender, password_reset_email


def configured_sender(port=587):
    return SmtpEmailSender(
        host="smtp.example.com",
        port=port,
        username="mailer",
        password="secret",
        use_tls=True,
        sender="HR Portal <noreply@example.com>",
    )


class TestSmtpEmailSender:

    def test_unconfigured_sender_only_logs(self, monkeypatch):
        from hrportal.services import email

        monkeypatch.setattr(email.settings, "smtp_host", None)
        with patch("smtplib.SMTP") as smtp:
            assert SmtpEmailSender().send("a@example.com", "Hi", "<p>Hi</p>")
        smtp.assert_not_called()

    def test_starttls_delivery(self):
        with patch("smtplib.SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            assert configured_sender().send("a@example.com", "Hi", "<p>Hi</p>", "Hi")

        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        server.send_message.assert_called_once()

    def test_ssl_port(self):
        with patch("smtplib.SMTP_SSL") as smtp_ssl:
            assert configured_sender(port=465).send("a@example.com", "Hi", "<p>Hi</p>")
        smtp_ssl.return_value.__enter__.return_value.send_message.assert_called_once()

    def test_smtp_failure_returns_false(self):
        with patch("smtplib.SMTP") as smtp:
            smtp.return_value.__enter__.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"no")
            assert configured_sender().send("a@example.com", "Hi", "<p>Hi</p>") is False


def test_reset_email_escapes_link():
    message = password_reset_email("https://hr.example.com/reset-password?token=abc&email=a%40example.com")
    assert "token=abc&amp;email" in message["html"]
    assert "token=abc&email" in message["text"]
    assert message["subject"]
