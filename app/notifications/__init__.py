"""
Notifications app for in-app notification records.

Domain services call ``notify(user_id, event_type, payload)`` once their
transaction has committed; delivery is best-effort and never fails the
caller.

Usage:
    from notifications.services import notify

    notify(commission.client_id, NotificationEvent.COMMISSION_ACCEPTED, {
        "commission_id": str(commission.id),
    })
"""
