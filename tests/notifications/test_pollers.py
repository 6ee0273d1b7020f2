"""
Tests for the global, brand and mention pollers.
"""

from unittest.mock import Mock

import pytest

from apps.api_client.schemas import Page
from apps.api_client.services import DispatchAPIError, SessionExpiredError
from apps.brands.schemas import Brand
from apps.notifications.schemas import Mention
from apps.notifications.services import BrandTicketPoller, GlobalTicketPoller, MentionTracker
from apps.notifications.state import PollState
from apps.tickets.schemas import Comment, Ticket


def ticket(ticket_id: str, brand_id: str = 'brand-1', status: str = 'open', comments: int = 0,
           number: int = 7) -> Ticket:
    return Ticket(id=ticket_id, brand_id=brand_id, title=f'Title {ticket_id}', ticket_number=number,
                  status=status, comment_count=comments)


def comment(author_type: str, author_name: str | None = None) -> Comment:
    metadata = {'authorName': author_name} if author_name else {}
    return Comment(id='c1', ticket_id='t', body='hi', author_type=author_type, metadata=metadata)


# ===============================================================================
# GLOBAL POLLER
# ===============================================================================

class TestGlobalTicketPoller:
    @pytest.fixture
    def poller(self):
        poller = GlobalTicketPoller('tok', PollState(), cache_scope='org-1')
        poller.brands = Mock()
        poller.brands.list_brands.return_value = [Brand(id='brand-1', name='Acme'), Brand(id='brand-2', name='Globex')]
        poller.tickets = Mock()
        return poller

    def _serve(self, poller, tickets_by_brand):
        poller.tickets.list_tickets.side_effect = lambda brand_id, limit: Page(data=tickets_by_brand.get(brand_id, []))

    def test_first_poll_seeds_without_notifications(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a')]})

        result = poller.poll()

        assert result.seeded is True
        assert result.notifications == []
        assert poller.state.first_load is False
        poller.tickets.list_tickets.assert_any_call('brand-1', limit=20)

    def test_new_ticket_notification_has_brand_prefix(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a')]})
        poller.poll()
        self._serve(poller, {'brand-1': [ticket('a')], 'brand-2': [ticket('b', brand_id='brand-2', number=9)]})

        result = poller.poll()

        assert result.changed is True
        [notification] = result.notifications
        assert notification.title == '[Globex] New ticket: #9'
        assert notification.description == 'Title b'
        assert notification.url == '/brands/brand-2/tickets/b'
        assert notification.duration_ms == 8000
        assert notification.desktop is True

    def test_customer_reply_notifies_with_author(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a', comments=1)]})
        poller.poll()
        self._serve(poller, {'brand-1': [ticket('a', comments=2)]})
        poller.tickets.list_comments.return_value = [comment('AGENT'), comment('CUSTOMER', 'Dana')]

        [notification] = poller.poll().notifications

        assert notification.title == '[Acme] #7 reply from Dana'

    def test_customer_reply_without_name(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a')]})
        poller.poll()
        self._serve(poller, {'brand-1': [ticket('a', comments=1)]})
        poller.tickets.list_comments.return_value = [comment('CUSTOMER')]

        [notification] = poller.poll().notifications

        assert notification.title.endswith('reply from Customer')

    def test_agent_reply_is_silent_but_still_a_change(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a')]})
        poller.poll()
        self._serve(poller, {'brand-1': [ticket('a', comments=1)]})
        poller.tickets.list_comments.return_value = [comment('AGENT')]

        result = poller.poll()

        assert result.notifications == []
        assert result.changed is True

    def test_status_change_is_toast_only(self, poller) -> None:
        self._serve(poller, {'brand-1': [ticket('a', status='open')]})
        poller.poll()
        self._serve(poller, {'brand-1': [ticket('a', status='resolved')]})

        [notification] = poller.poll().notifications

        assert notification.title == '[Acme] #7 status changed'
        assert notification.description == 'open → resolved'
        assert notification.desktop is False

    def test_failing_brand_is_skipped(self, poller) -> None:
        def list_tickets(brand_id, limit):
            if brand_id == 'brand-2':
                raise DispatchAPIError('boom', status_code=500)
            return Page(data=[ticket('a')])

        poller.tickets.list_tickets.side_effect = list_tickets
        poller.poll()

        assert set(poller.state.snapshots) == {'a'}

    def test_expired_session_propagates(self, poller) -> None:
        poller.tickets.list_tickets.side_effect = SessionExpiredError('gone', status_code=401)
        with pytest.raises(SessionExpiredError):
            poller.poll()

    def test_brand_list_is_cached(self, poller) -> None:
        self._serve(poller, {})
        poller.poll()
        poller.poll()
        poller.brands.list_brands.assert_called_once()

    def test_no_brands(self, poller) -> None:
        poller.brands.list_brands.return_value = []
        result = poller.poll()
        assert result.notifications == []
        assert poller.state.first_load is True


# ===============================================================================
# BRAND POLLER
# ===============================================================================

class TestBrandTicketPoller:
    def _poller(self, state, brand_id='brand-1', tickets=()):
        poller = BrandTicketPoller('tok', state, brand_id)
        poller.tickets = Mock()
        poller.tickets.list_tickets.return_value = Page(data=list(tickets))
        return poller

    def test_seed_then_notify(self) -> None:
        state = PollState()
        self._poller(state, tickets=[ticket('a', comments=0)]).poll()

        poller = self._poller(state, tickets=[ticket('a', comments=1), ticket('b', number=8)])
        result = poller.poll()

        titles = [n.title for n in result.notifications]
        assert titles == ['New comment on #7', 'New ticket: #8']
        assert result.notifications[0].url == '/workspaces/brand-1/tickets/a'
        assert all(n.duration_ms is None for n in result.notifications)
        poller.tickets.list_tickets.assert_called_once_with('brand-1', limit=50)

    def test_switching_brand_reseeds(self) -> None:
        state = PollState()
        self._poller(state, tickets=[ticket('a')]).poll()

        result = self._poller(state, brand_id='brand-2', tickets=[ticket('z', brand_id='brand-2')]).poll()

        assert result.seeded is True
        assert result.notifications == []
        assert state.brand_id == 'brand-2'


# ===============================================================================
# MENTIONS
# ===============================================================================

def mention(mention_id: str, **fields) -> Mention:
    return Mention(id=mention_id, ticket_id='tkt-1', brand_id='brand-1', **fields)


class TestMentionTracker:
    def _tracker(self, state, mentions):
        tracker = MentionTracker('tok', state)
        tracker.fetch_unread = Mock(return_value=mentions)
        return tracker

    def test_empty_first_result_does_not_seed(self) -> None:
        state = PollState()
        _, result = self._tracker(state, []).poll()
        assert state.first_load is True
        assert result.seeded is False

        self._tracker(state, [mention('m1')]).poll()
        assert state.first_load is False

        _, result = self._tracker(state, [mention('m1'), mention('m2', mentioned_by='Sam')]).poll()
        [notification] = result.notifications
        assert notification.title == 'Sam mentioned you'

    def test_notification_text(self) -> None:
        labelled = MentionTracker.build_notification(
            mention('m1', ticket_prefix='ACME', ticket_number=12, ticket_title='Broken login')
        )
        assert labelled.title == 'You were mentioned'
        assert labelled.description == 'ACME-12: Broken login'
        assert labelled.url == '/brands/brand-1/tickets/tkt-1'
        assert labelled.duration_ms == 10000

        bare = MentionTracker.build_notification(mention('m2'))
        assert bare.description == 'Ticket: View ticket'

    def test_fetch_unread_tolerates_errors(self) -> None:
        tracker = MentionTracker('tok')
        tracker.client = Mock()
        tracker.client.get.side_effect = DispatchAPIError('not found', status_code=404)
        assert tracker.fetch_unread() == []

        tracker.client.get.side_effect = SessionExpiredError('gone', status_code=401)
        with pytest.raises(SessionExpiredError):
            tracker.fetch_unread()

    def test_fetch_unread_parses(self) -> None:
        tracker = MentionTracker('tok')
        tracker.client = Mock()
        tracker.client.get.return_value = {'data': [{'id': 'm1', 'ticketId': 't1', 'brandId': 'b1'}]}
        assert [m.id for m in tracker.fetch_unread()] == ['m1']
        tracker.client.get.assert_called_once_with('/auth/mentions/unread')

    def test_acknowledge(self) -> None:
        tracker = MentionTracker('tok')
        tracker.client = Mock()
        tracker.client.post.return_value = None
        assert tracker.acknowledge('m1') == {'success': True}
        tracker.client.post.assert_called_once_with('/auth/mentions/m1/ack')

        tracker.client.post.side_effect = DispatchAPIError('boom', status_code=500)
        assert tracker.acknowledge_ticket('t1') == {'success': False}
