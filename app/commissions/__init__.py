"""
Commissions app.

This app handles:
- Admission control for new requests (artist queue and open/paused flags)
- The commission lifecycle (request, accept, decline, complete, cancel)
- Milestone payment plans (generate, customise, confirm, start, complete)

Payments against a commission live in the payments app, which credits
milestones through MilestonePlanService.mark_lowest_unpaid_paid().
"""
