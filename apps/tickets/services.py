# ===============================================================================
# TICKETS API CLIENT SERVICE - BRAND TICKETS, COMMENTS, WATCHERS 🎫
# ===============================================================================

import logging
from typing import Any

from apps.api_client.schemas import Page, unwrap_list
from apps.api_client.services import DispatchAPIClient, DispatchAPIError
from apps.tickets.schemas import BULK_ACTIONS, AuditLog, Comment, DashboardStats, Ticket, Watcher

logger = logging.getLogger(__name__)


class TicketAPIClient(DispatchAPIClient):
    """
    Ticket API client for the dashboard.

    Provides brand-scoped access to:
    - Tickets (CRUD, spam, merge, bulk actions)
    - Comments and watchers
    - Audit logs
    - Cross-brand dashboard listing and stats
    """

    # ===============================================================================
    # TICKETS
    # ===============================================================================

    def list_tickets(self, brand_id: str, *, status: str | None = None, priority: str | None = None,
                     assignee_id: str | None = None, source: str | None = None, search: str | None = None,
                     is_spam: bool | None = None, cursor: str | None = None,
                     limit: int | None = None) -> Page[Ticket]:
        """
        Get one page of a brand's tickets.

        Args:
            brand_id: Brand (workspace) to list
            status: open, pending, resolved or closed
            is_spam: True lists the spam folder
            cursor: `next_cursor` of the previous page

        Returns:
            Page of Ticket
        """
        params = {
            'status': status,
            'priority': priority,
            'assigneeId': assignee_id,
            'source': source,
            'search': search,
            'isSpam': is_spam,
            'cursor': cursor,
            'limit': limit,
        }
        try:
            page = self.get_page(f'/brands/{brand_id}/tickets', Ticket.from_api, params=params)
        except DispatchAPIError as e:
            logger.error(f"🔥 [Tickets API] Error listing tickets for brand {brand_id}: {e}")
            raise
        logger.debug(f"✅ [Tickets API] Retrieved {len(page)} tickets for brand {brand_id}")
        return page

    def get_ticket(self, brand_id: str, ticket_id: str) -> Ticket:
        return Ticket.from_api(self.get(f'/brands/{brand_id}/tickets/{ticket_id}'))

    def create_ticket(self, brand_id: str, title: str, body: str | None = None, **fields: Any) -> Ticket:
        """Create a ticket; extra keyword fields are sent as-is (camelCase)."""
        data = {'title': title, **fields}
        if body is not None:
            data['body'] = body
        ticket = Ticket.from_api(self.post(f'/brands/{brand_id}/tickets', data))
        logger.info(f"✅ [Tickets API] Created ticket {ticket.label} in brand {brand_id}")
        return ticket

    def update_ticket(self, brand_id: str, ticket_id: str, **changes: Any) -> Ticket:
        return Ticket.from_api(self.patch(f'/brands/{brand_id}/tickets/{ticket_id}', changes))

    def delete_ticket(self, brand_id: str, ticket_id: str) -> None:
        self.delete(f'/brands/{brand_id}/tickets/{ticket_id}')
        logger.info(f"🗑️ [Tickets API] Deleted ticket {ticket_id} in brand {brand_id}")

    def mark_spam(self, brand_id: str, ticket_id: str, is_spam: bool = True) -> Ticket:
        return Ticket.from_api(self.post(f'/brands/{brand_id}/tickets/{ticket_id}/spam', {'isSpam': is_spam}))

    def merge(self, brand_id: str, target_ticket_id: str, source_ticket_ids: list[str]) -> dict[str, Any]:
        """
        Merge `source_ticket_ids` into the target ticket.

        Returns:
            {'targetTicketId', 'mergedTicketIds', 'mergedCount'}
        """
        result = self.post(
            f'/brands/{brand_id}/tickets/{target_ticket_id}/merge',
            {'sourceTicketIds': list(source_ticket_ids)},
        ) or {}
        logger.info(f"🔀 [Tickets API] Merged {result.get('mergedCount', 0)} tickets into {target_ticket_id}")
        return result

    def bulk_action(self, brand_id: str, action: str, ticket_ids: list[str]) -> dict[str, int]:
        """
        Apply one action to many tickets.

        Raises:
            ValueError: unknown action, before any request is made
        """
        if action not in BULK_ACTIONS:
            raise ValueError(f"Unsupported bulk action: {action!r} (expected one of {', '.join(BULK_ACTIONS)})")
        result = self.post(f'/brands/{brand_id}/tickets/bulk', {'action': action, 'ticketIds': list(ticket_ids)}) or {}
        logger.info(
            f"✅ [Tickets API] Bulk {action} on {len(ticket_ids)} tickets: "
            f"{result.get('success', 0)} ok, {result.get('failed', 0)} failed"
        )
        return {'success': result.get('success', 0), 'failed': result.get('failed', 0)}

    # ===============================================================================
    # COMMENTS
    # ===============================================================================

    def list_comments(self, brand_id: str, ticket_id: str) -> list[Comment]:
        data = self.get(f'/brands/{brand_id}/tickets/{ticket_id}/comments')
        return [Comment.from_api(item) for item in unwrap_list(data)]

    def create_comment(self, brand_id: str, ticket_id: str, body: str, *, is_internal: bool = False,
                       author: str | None = None, author_email: str | None = None) -> Comment:
        data: dict[str, Any] = {'body': body, 'isInternal': is_internal}
        if author:
            data['author'] = author
        if author_email:
            data['authorEmail'] = author_email
        return Comment.from_api(self.post(f'/brands/{brand_id}/tickets/{ticket_id}/comments', data))

    def update_comment(self, brand_id: str, ticket_id: str, comment_id: str, *, body: str | None = None,
                       is_internal: bool | None = None) -> Comment:
        data: dict[str, Any] = {}
        if body is not None:
            data['body'] = body
        if is_internal is not None:
            data['isInternal'] = is_internal
        return Comment.from_api(self.patch(f'/brands/{brand_id}/tickets/{ticket_id}/comments/{comment_id}', data))

    def delete_comment(self, brand_id: str, ticket_id: str, comment_id: str) -> None:
        self.delete(f'/brands/{brand_id}/tickets/{ticket_id}/comments/{comment_id}')

    # ===============================================================================
    # WATCHERS
    # ===============================================================================

    def list_watchers(self, brand_id: str, ticket_id: str) -> list[Watcher]:
        data = self.get(f'/brands/{brand_id}/tickets/{ticket_id}/watchers')
        return [Watcher.from_api(item) for item in unwrap_list(data)]

    def add_watcher(self, brand_id: str, ticket_id: str, member_id: str, member_email: str,
                    member_name: str | None = None) -> Watcher:
        data = {'memberId': member_id, 'memberEmail': member_email}
        if member_name:
            data['memberName'] = member_name
        return Watcher.from_api(self.post(f'/brands/{brand_id}/tickets/{ticket_id}/watchers', data))

    def remove_watcher(self, brand_id: str, ticket_id: str, member_id: str) -> None:
        self.delete(f'/brands/{brand_id}/tickets/{ticket_id}/watchers/{member_id}')

    def update_watcher_preferences(self, brand_id: str, ticket_id: str, member_id: str, *,
                                   notify_on_comment: bool | None = None,
                                   notify_on_status_change: bool | None = None) -> Watcher:
        data: dict[str, bool] = {}
        if notify_on_comment is not None:
            data['notifyOnComment'] = notify_on_comment
        if notify_on_status_change is not None:
            data['notifyOnStatusChange'] = notify_on_status_change
        return Watcher.from_api(self.patch(f'/brands/{brand_id}/tickets/{ticket_id}/watchers/{member_id}', data))

    # ===============================================================================
    # AUDIT LOGS
    # ===============================================================================

    def list_audit_logs(self, brand_id: str, *, entity_type: str | None = None, entity_id: str | None = None,
                        event: str | None = None, cursor: str | None = None,
                        limit: int | None = None) -> Page[AuditLog]:
        params = {
            'entityType': entity_type,
            'entityId': entity_id,
            'event': event,
            'cursor': cursor,
            'limit': limit,
        }
        return self.get_page(f'/brands/{brand_id}/logs', AuditLog.from_api, params=params)

    def get_ticket_logs(self, brand_id: str, ticket_id: str) -> list[AuditLog]:
        data = self.get(f'/brands/{brand_id}/tickets/{ticket_id}/logs')
        return [AuditLog.from_api(item) for item in unwrap_list(data)]

    # ===============================================================================
    # CROSS-BRAND DASHBOARD
    # ===============================================================================

    def list_dashboard_tickets(self, *, brand_ids: list[str] | None = None, customer_id: str | None = None,
                               status: str | None = None, priority: str | None = None,
                               search: str | None = None, cursor: str | None = None,
                               limit: int | None = None) -> Page[Ticket]:
        params = {
            'brandIds': brand_ids,
            'customerId': customer_id,
            'status': status,
            'priority': priority,
            'search': search,
            'cursor': cursor,
            'limit': limit,
        }
        return self.get_page('/tickets', Ticket.from_api, params=params)

    def get_dashboard_stats(self, brand_ids: list[str] | None = None) -> DashboardStats:
        return DashboardStats.from_api(self.get('/tickets/stats', params={'brandIds': brand_ids}) or {})
