import base64
import smtplib
import threading
import unittest
from unittest.mock import patch, MagicMock

from provisioner.email_service import (
    EmailConfig,
    SMTPEmailProvider,
    GmailApiProvider,
    EmailSender,
    WelcomeNotifier,
    build_welcome_email,
)
from provisioner.models import ProvisionedAccount


ACCOUNT = ProvisionedAccount(email='jane.doe@acme.com', name='Jane Doe', department='R&D', title='Engineer',
                             manager='Big Boss')


def smtp_config(**kwargs):
    data = dict(provider='smtp', from_address='it@acme.com', smtp_host='smtp.acme.com',
                smtp_username='it@acme.com', smtp_password='password123')
    data.update(kwargs)
    return EmailConfig(**data)


class TestEmailConfig(unittest.TestCase):
    """Test EmailConfig dataclass and validation"""

    def test_from_dict(self):
        config = EmailConfig.from_dict({
            'provider': 'SMTP',
            'from_address': 'it@acme.com',
            'smtp_host': 'smtp.acme.com',
            'smtp_port': '465',
            'smtp_use_ssl': True,
        })
        self.assertEqual(config.provider, 'smtp')
        self.assertEqual(config.smtp_port, 465)
        self.assertTrue(config.smtp_use_ssl)
        self.assertTrue(config.smtp_use_tls)
        self.assertEqual(config.from_name, 'IT Department')

    def test_smtp_validation(self):
        self.assertEqual(smtp_config().validate(), [])
        errors = smtp_config(smtp_host=None).validate()
        self.assertIn('SMTP host is required', errors)
        errors = smtp_config(smtp_password=None).validate()
        self.assertIn('SMTP password is required', errors)

    def test_gmail_validation(self):
        config = EmailConfig(provider='gmail', from_address='it@acme.com')
        self.assertIn('Service account credentials are required for Gmail', config.validate())
        config.service_account = {'type': 'service_account'}
        self.assertEqual(config.validate(), [])

    def test_unknown_provider(self):
        config = EmailConfig(provider='pigeon', from_address='it@acme.com')
        self.assertIn('Unknown provider: pigeon', config.validate())
        with self.assertRaises(ValueError):
            EmailSender(config)


class TestSMTPEmailProvider(unittest.TestCase):
    @patch('smtplib.SMTP')
    def test_send_starttls(self, mock_smtp):
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server

        provider = SMTPEmailProvider(smtp_config())
        self.assertTrue(provider.send('jane@example.com', 'Welcome', 'Hello'))

        mock_smtp.assert_called_once_with('smtp.acme.com', 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('it@acme.com', 'password123')
        msg = server.send_message.call_args[0][0]
        self.assertEqual(msg['To'], 'jane@example.com')
        self.assertEqual(msg['From'], 'IT Department <it@acme.com>')

    @patch('smtplib.SMTP_SSL')
    def test_send_ssl_without_login(self, mock_smtp_ssl):
        server = MagicMock()
        mock_smtp_ssl.return_value.__enter__.return_value = server

        provider = SMTPEmailProvider(smtp_config(smtp_use_ssl=True, smtp_port=465, smtp_username=None,
                                                 smtp_password=None))
        provider.send('jane@example.com', 'Welcome', 'Hello')
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    @patch('smtplib.SMTP')
    def test_send_auth_failure(self, mock_smtp):
        server = MagicMock()
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b'Bad credentials')
        mock_smtp.return_value.__enter__.return_value = server

        provider = SMTPEmailProvider(smtp_config())
        with self.assertRaises(smtplib.SMTPAuthenticationError):
            provider.send('jane@example.com', 'Welcome', 'Hello')


class TestGmailApiProvider(unittest.TestCase):
    def test_send(self):
        service = MagicMock()
        config = EmailConfig(provider='gmail', from_address='it@acme.com', service_account={'type': 'x'})
        provider = GmailApiProvider(config, service=service)
        self.assertTrue(provider.send('jane@example.com', 'Welcome', 'Hello'))

        kwargs = service.users().messages().send.call_args[1]
        self.assertEqual(kwargs['userId'], 'me')
        raw = base64.urlsafe_b64decode(kwargs['body']['raw']).decode('utf-8')
        self.assertIn('To: jane@example.com', raw)

    @patch('googleapiclient.discovery.build')
    @patch('google.oauth2.service_account.Credentials.from_service_account_info')
    def test_service_per_thread(self, mock_credentials, mock_build):
        mock_build.side_effect = lambda *args, **kwargs: MagicMock()
        config = EmailConfig(provider='gmail', from_address='it@acme.com', service_account={'type': 'x'})
        provider = GmailApiProvider(config)

        service = provider._get_service()
        self.assertIs(provider._get_service(), service)
        thread_services = []
        thread = threading.Thread(target=lambda: thread_services.append(provider._get_service()))
        thread.start()
        thread.join()
        self.assertIsNot(thread_services[0], service)
        mock_credentials.return_value.with_subject.assert_called_with('it@acme.com')


class TestWelcomeNotifier(unittest.TestCase):
    def test_welcome_email(self):
        body = build_welcome_email(ACCOUNT, 'Aa1!Aa1!Aa1!')
        self.assertIn('jane.doe@acme.com', body)
        self.assertIn('Aa1!Aa1!Aa1!', body)
        self.assertIn('Big Boss', body)

    def test_notify(self):
        sender = MagicMock()
        sender.send.return_value = True
        notifier = WelcomeNotifier(sender)
        self.assertTrue(notifier.notify(ACCOUNT, 'jane@example.com', 'secret'))
        to, subject, body = sender.send.call_args[0]
        self.assertEqual(to, 'jane@example.com')
        self.assertIn('secret', body)

    def test_notify_never_raises(self):
        sender = MagicMock()
        sender.send.side_effect = smtplib.SMTPException('connection closed')
        notifier = WelcomeNotifier(sender)
        with self.assertLogs(level='WARNING'):
            self.assertFalse(notifier.notify(ACCOUNT, 'jane@example.com', 'secret'))

    def test_notify_without_recipient(self):
        sender = MagicMock()
        notifier = WelcomeNotifier(sender)
        self.assertFalse(notifier.notify(ACCOUNT, '', 'secret'))
        sender.send.assert_not_called()


if __name__ == '__main__':
    unittest.main()
