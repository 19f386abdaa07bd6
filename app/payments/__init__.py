"""
Payments app for commission payments through Stripe and PayPal.

This app handles:
- Opening provider payments for deposits, milestones, final payments and tips
- Reconciling webhook deliveries and client captures exactly once
- Holding payouts in escrow and releasing them to the artist

Related apps:
    - commissions: Commission and milestone state the payments settle
    - notifications: Payment event notifications

Usage:
    from payments.services import PaymentIntentBuilder, ReconciliationService

    opened = PaymentIntentBuilder().open_payment(commission.id, client, "deposit", "stripe")
    ReconciliationService().capture(opened.provider_order_id, client, "stripe")
"""
