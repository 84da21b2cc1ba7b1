"""
Menu Statistics Aggregator

Maintains one rollup document per (menu, calendar day) in the document
store and answers the admin reporting queries over them.

Rollups are a best-effort view derived from the relational orders: an update
that fails is logged and reported back to the caller, never raised. Counts
are only ever incremented; cancelled orders stay counted.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Tuple

from pymongo.collection import Collection

logger = logging.getLogger(__name__)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time(23, 59, 59, 999000))


class MenuStatsAggregator:
    """Per-menu, per-day order count and revenue rollups."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def on_order_created(
        self,
        menu_id: int,
        menu_title: str,
        service_date: date,
        revenue: float,
    ) -> bool:
        """
        Fold one new order into its menu/day rollup.

        Returns True when the rollup was written, False when the store failed.
        """
        try:
            start, end = day_bounds(service_date)
            existing = self.collection.find_one({
                "menu_id": menu_id,
                "date": {"$gte": start, "$lte": end},
            })

            if existing:
                self.collection.update_one(
                    {"_id": existing["_id"]},
                    {"$inc": {"order_count": 1, "revenue": revenue}},
                )
            else:
                self.collection.insert_one({
                    "menu_id": menu_id,
                    "menu_title": menu_title,
                    "order_count": 1,
                    "revenue": revenue,
                    "date": start,
                    "created_at": datetime.now(timezone.utc),
                })
            return True
        except Exception:
            logger.exception(
                f"Failed to update statistics for menu {menu_id} on {service_date}"
            )
            return False

    def orders_by_menu(self) -> List[Dict[str, Any]]:
        """Order count and revenue per menu across all days, busiest first."""
        pipeline = [
            {
                "$group": {
                    "_id": "$menu_id",
                    "menu_title": {"$first": "$menu_title"},
                    "total_orders": {"$sum": "$order_count"},
                    "total_revenue": {"$sum": "$revenue"},
                }
            },
            {"$sort": {"total_orders": -1}},
            {
                "$project": {
                    "_id": 0,
                    "menu_id": "$_id",
                    "menu_title": 1,
                    "total_orders": 1,
                    "total_revenue": 1,
                }
            },
        ]
        return list(self.collection.aggregate(pipeline))

    def revenue(
        self,
        menu_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Revenue per menu, highest first, with the grand total.

        Args:
            menu_id: Restrict to one menu
            start_date: First service day to include
            end_date: Last service day to include (the whole day counts)
        """
        match: Dict[str, Any] = {}
        if start_date or end_date:
            date_filter = {}
            if start_date:
                date_filter["$gte"] = day_bounds(start_date)[0]
            if end_date:
                date_filter["$lte"] = day_bounds(end_date)[1]
            match["date"] = date_filter
        if menu_id is not None:
            match["menu_id"] = menu_id

        pipeline = []
        if match:
            pipeline.append({"$match": match})
        pipeline += [
            {
                "$group": {
                    "_id": "$menu_id",
                    "menu_title": {"$first": "$menu_title"},
                    "total_revenue": {"$sum": "$revenue"},
                    "order_count": {"$sum": "$order_count"},
                }
            },
            {"$sort": {"total_revenue": -1}},
            {
                "$project": {
                    "_id": 0,
                    "menu_id": "$_id",
                    "menu_title": 1,
                    "total_revenue": 1,
                    "order_count": 1,
                }
            },
        ]
        results = list(self.collection.aggregate(pipeline))

        return {
            "results": results,
            "total": round(sum(r["total_revenue"] for r in results), 2),
            "filters": {
                "menu_id": menu_id,
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
            },
        }
