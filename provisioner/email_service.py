#  _  __
# | |/ /___ ___ _ __  ___ _ _ ®
# | ' </ -_) -_) '_ \/ -_) '_|
# |_|\_\___\___| .__/\___|_|
#              |_|
#
# Keeper Directory Provisioner
# Copyright 2026 Keeper Security Inc.
# Contact: ops@keepersecurity.com
#

"""
Welcome notification for newly provisioned accounts.

Supports two providers: plain SMTP and the Gmail API through the same
service account used for the directory (domain-wide delegation to the
sender address). Notification is best effort: WelcomeNotifier never raises.
"""

from __future__ import annotations
import base64
import logging
import smtplib
import ssl
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Dict, Any, List

from .constants import GMAIL_SEND_SCOPES
from .models import ProvisionedAccount


@dataclass
class EmailConfig:
    """
    Email configuration loaded from the "email" section of config.json.

    Supported providers:
    - smtp: Standard SMTP with username/password
    - gmail: Gmail API with service account delegated to from_address
    """
    provider: str
    from_address: str
    from_name: str = "IT Department"

    # SMTP-specific
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False

    # Gmail-specific
    service_account: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], service_account: Optional[Dict[str, Any]] = None) -> EmailConfig:
        return cls(
            provider=(data.get('provider') or '').lower(),
            from_address=data.get('from_address') or '',
            from_name=data.get('from_name') or 'IT Department',
            smtp_host=data.get('smtp_host'),
            smtp_port=int(data.get('smtp_port') or 587),
            smtp_username=data.get('smtp_username'),
            smtp_password=data.get('smtp_password'),
            smtp_use_tls=data.get('smtp_use_tls', True) is not False,
            smtp_use_ssl=data.get('smtp_use_ssl') is True,
            service_account=service_account,
        )

    def validate(self) -> List[str]:
        """
        Validate email configuration completeness.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.provider:
            errors.append("Provider is required")

        if not self.from_address:
            errors.append("From address is required")

        if self.provider == 'smtp':
            if not self.smtp_host:
                errors.append("SMTP host is required")
            if self.smtp_username and not self.smtp_password:
                errors.append("SMTP password is required")

        elif self.provider == 'gmail':
            if not self.service_account:
                errors.append("Service account credentials are required for Gmail")

        elif self.provider:
            errors.append(f"Unknown provider: {self.provider}")

        return errors


class EmailProvider(ABC):
    """
    Abstract base class for email providers.
    """

    def __init__(self, config: EmailConfig):
        self.config = config
        validation_errors = config.validate()
        if validation_errors:
            raise ValueError(f"Invalid email configuration: {', '.join(validation_errors)}")

    def _build_message(self, to: str, subject: str, body: str):
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.config.from_name} <{self.config.from_address}>"
        msg['To'] = to
        msg.attach(MIMEText(body, 'plain'))
        return msg

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send email via provider.

        Returns:
            True if sent successfully

        Raises:
            Exception: If send fails
        """
        pass


class SMTPEmailProvider(EmailProvider):
    def send(self, to: str, subject: str, body: str) -> bool:
        msg = self._build_message(to, subject, body)
        try:
            if self.config.smtp_use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port,
                                      context=context, timeout=30) as server:
                    if self.config.smtp_username:
                        server.login(self.config.smtp_username, self.config.smtp_password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as server:
                    server.ehlo()
                    if self.config.smtp_use_tls:
                        context = ssl.create_default_context()
                        server.starttls(context=context)
                        server.ehlo()
                    if self.config.smtp_username:
                        server.login(self.config.smtp_username, self.config.smtp_password)
                    server.send_message(msg)

            logging.info("[EMAIL] SMTP email sent to %s via %s", to, self.config.smtp_host)
            return True

        except smtplib.SMTPAuthenticationError as e:
            logging.error("[EMAIL] SMTP authentication failed: %s", e)
            raise
        except smtplib.SMTPException as e:
            logging.error("[EMAIL] SMTP error: %s", e)
            raise


class GmailApiProvider(EmailProvider):
    """
    Gmail API provider.

    Uses the directory service account, impersonating the sender address.
    Each thread gets its own API client.
    """

    def __init__(self, config: EmailConfig, service=None):
        super().__init__(config)
        self.service = service
        self._local = threading.local()

    def _get_service(self):
        if self.service:
            return self.service
        service = getattr(self._local, 'service', None)
        if not service:
            from google.oauth2 import service_account
            from googleapiclient.discovery import build

            cred = service_account.Credentials.from_service_account_info(
                self.config.service_account, scopes=GMAIL_SEND_SCOPES).with_subject(self.config.from_address)
            service = build('gmail', 'v1', credentials=cred, cache_discovery=False)
            self._local.service = service
        return service

    def send(self, to: str, subject: str, body: str) -> bool:
        msg = self._build_message(to, subject, body)
        raw_message = base64.urlsafe_b64encode(msg.as_bytes()).decode('utf-8')
        service = self._get_service()
        service.users().messages().send(userId='me', body={'raw': raw_message}).execute()
        logging.info("[EMAIL] Gmail API email sent to %s", to)
        return True


class EmailSender:
    """
    Routes messages to the configured provider.

    Usage:
        config = EmailConfig(...)
        sender = EmailSender(config)
        sender.send(to='user@example.com', subject='Welcome', body='Hello')
    """

    provider_map = {
        'smtp': SMTPEmailProvider,
        'gmail': GmailApiProvider,
    }

    def __init__(self, config: EmailConfig):
        self.config = config
        provider_class = self.provider_map.get((config.provider or '').lower())
        if not provider_class:
            raise ValueError(
                f"Unknown email provider: {config.provider}. "
                f"Supported: {', '.join(self.provider_map.keys())}"
            )
        self.provider = provider_class(config)

    def send(self, to: str, subject: str, body: str) -> bool:
        logging.info("[EMAIL] Sending email to %s via %s", to, self.config.provider)
        return self.provider.send(to, subject, body)


def build_welcome_email(account: ProvisionedAccount, temporary_password: str) -> str:
    lines = [
        f'Hello {account.name},',
        '',
        f'Your account {account.email} has been created.',
        f'Temporary password: {temporary_password}',
        '',
        'You will be asked to choose a new password on first sign-in.',
    ]
    if account.manager:
        lines.append(f'Your manager: {account.manager}')
    return '\n'.join(lines)


class WelcomeNotifier:
    subject = 'Your new account'

    def __init__(self, sender: EmailSender):
        self.sender = sender

    def notify(self, account: ProvisionedAccount, recipient: str, temporary_password: str) -> bool:
        """Returns False on any delivery failure; the failure is logged, never raised."""
        if not recipient:
            logging.warning('Welcome email for "%s" skipped: no recipient', account.email)
            return False
        try:
            body = build_welcome_email(account, temporary_password)
            return self.sender.send(recipient, self.subject, body) is True
        except Exception as e:
            logging.warning('Welcome email for "%s" was not delivered: %s', account.email, e)
            return False
