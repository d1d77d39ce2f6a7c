"""Tests for login code delivery"""

from unittest.mock import MagicMock

from passwallet.services.code_delivery import LogCodeDelivery, MailCodeDelivery


def test_log_delivery_always_succeeds():
    assert LogCodeDelivery().deliver('a@example.com', '123456') is True


def test_mail_delivery_sends_message():
    mail = MagicMock()
    delivery = MailCodeDelivery(mail, sender='noreply@example.com')

    assert delivery.deliver('a@example.com', '123456') is True

    message = mail.send.call_args.args[0]
    assert message.recipients == ['a@example.com']
    assert '123456' in message.body
    assert message.subject == 'Your PassWallet login code'


def test_mail_delivery_failure_returns_false():
    mail = MagicMock()
    mail.send.side_effect = ConnectionRefusedError("smtp down")

    assert MailCodeDelivery(mail, sender='noreply@example.com').deliver('a@example.com', '123456') is False
