"""
Tests for the watch_tickets management command.
"""

from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.notifications.schemas import Notification
from apps.notifications.services import PollResult

POLL = 'apps.notifications.management.commands.watch_tickets.GlobalTicketPoller.poll'
SLEEP = 'apps.notifications.management.commands.watch_tickets.time.sleep'


def test_requires_token(monkeypatch) -> None:
    monkeypatch.delenv('DISPATCH_SESSION_TOKEN', raising=False)
    with pytest.raises(CommandError):
        call_command('watch_tickets', '--token', '')


@patch(SLEEP)
@patch(POLL)
def test_once_prints_baseline_then_notifications(mock_poll, mock_sleep) -> None:
    mock_poll.side_effect = [
        PollResult(seeded=True),
        PollResult(notifications=[Notification(title='New ticket', description='Printer on fire', url='/tickets/t1')]),
    ]
    out = StringIO()

    call_command('watch_tickets', '--token', 'tok', '--once', '--interval', '5', stdout=out)

    output = out.getvalue()
    assert 'Baseline recorded' in output
    assert 'New ticket' in output
    assert '/tickets/t1' in output
    mock_sleep.assert_called_once_with(5)


@patch(SLEEP)
@patch(POLL)
def test_transient_failure_keeps_watching(mock_poll, _sleep) -> None:
    mock_poll.side_effect = [DispatchAPIError('Dispatch API unavailable'), PollResult(seeded=True)]
    out = StringIO()

    call_command('watch_tickets', '--token', 'tok', '--once', stdout=out)

    assert 'Poll failed: Dispatch API unavailable' in out.getvalue()


@patch(POLL, side_effect=SessionExpiredError('Invalid token', status_code=401))
def test_rejected_token_stops(_poll) -> None:
    with pytest.raises(CommandError, match='Session token rejected'):
        call_command('watch_tickets', '--token', 'tok', stdout=StringIO())
