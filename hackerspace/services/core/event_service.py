"""
Event Service
Query building for the admin event log.
"""

from typing import Optional
from flask_sqlalchemy.pagination import Pagination
from hackerspace.data.core.event_info.event import Event


class EventService:

    @staticmethod
    def build_filtered_query(domain: Optional[str] = None, account_id: Optional[int] = None):
        query = Event.query

        if domain:
            query = query.filter(Event.domain == domain)

        if account_id:
            query = query.filter(Event.created_by_id == account_id)

        return query.order_by(Event.created_at.desc(), Event.id.desc())

    @staticmethod
    def get_list_data(request, page: int = 1, per_page: int = 50) -> Pagination:
        """
        Paginated event log with the request's filters applied.

        Args:
            request: Flask request (reads ``domain`` and ``account_id`` args)
            page: Page number (default: 1)
            per_page: Items per page (default: 50)
        """
        domain = request.args.get('domain')
        account_id = request.args.get('account_id', type=int)

        query = EventService.build_filtered_query(domain=domain, account_id=account_id)
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_domains():
        return [row[0] for row in Event.query.with_entities(Event.domain).distinct().order_by(Event.domain)]
