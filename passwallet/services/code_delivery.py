"""Delivery of one-time login codes."""

import logging

from flask_mail import Message

log = logging.getLogger(__name__)

class LogCodeDelivery:
    """Writes the code to the service log instead of emailing it."""
    
    def deliver(self, email, code):
        log.info("=" * 45)
        log.info(f"MOCK EMAIL TO: {email}")
        log.info(f"PassWallet login code: {code}")
        log.info("=" * 45)
        return True


class MailCodeDelivery:
    """Emails the code through Flask-Mail."""
    
    def __init__(self, mail, sender=None, app_name='PassWallet'):
        self.mail = mail
        self.sender = sender
        self.app_name = app_name
    
    def deliver(self, email, code):
        """Send the code; returns False when the mail server refuses it."""
        msg = Message(
            subject=f"Your {self.app_name} login code",
            recipients=[email],
            body=f"Your {self.app_name} login code is {code}.\n\nIt can be used once.",
            sender=self.sender,
        )
        try:
            self.mail.send(msg)
        except Exception as e:
            log.error(f"Error sending login code to {email}: {str(e)}")
            return False
        log.info(f"Sent login code email to {email}")
        return True
