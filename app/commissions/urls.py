"""
URL configuration for the commissions app.

All routes are prefixed with /api/v1/commissions/ when included in the main URLconf.
"""

from django.urls import path

from commissions import views

app_name = "commissions"

urlpatterns = [
    # Lifecycle
    path("", views.CommissionListCreateView.as_view(), name="commission-list"),
    path("<uuid:commission_id>/", views.CommissionDetailView.as_view(), name="commission-detail"),
    path("<uuid:commission_id>/accept/", views.AcceptCommissionView.as_view(), name="commission-accept"),
    path("<uuid:commission_id>/decline/", views.DeclineCommissionView.as_view(), name="commission-decline"),
    path("<uuid:commission_id>/complete/", views.CompleteCommissionView.as_view(), name="commission-complete"),
    path("<uuid:commission_id>/cancel/", views.CancelCommissionView.as_view(), name="commission-cancel"),
    path("<uuid:commission_id>/price/", views.SetPriceView.as_view(), name="commission-price"),
    path("<uuid:commission_id>/revisions/", views.RevisionRequestView.as_view(), name="commission-revisions"),
    path(
        "artists/<uuid:artist_id>/queue-status/",
        views.QueueStatusView.as_view(),
        name="artist-queue-status",
    ),
    # Milestone plans
    path("milestones/templates/", views.MilestoneTemplateListView.as_view(), name="milestone-templates"),
    path("<uuid:commission_id>/milestones/", views.MilestonePlanView.as_view(), name="milestone-plan"),
    path(
        "<uuid:commission_id>/milestones/generate/",
        views.GeneratePlanView.as_view(),
        name="milestone-generate",
    ),
    path("<uuid:commission_id>/milestones/custom/", views.CustomPlanView.as_view(), name="milestone-custom"),
    path("<uuid:commission_id>/milestones/confirm/", views.ConfirmPlanView.as_view(), name="milestone-confirm"),
    path("milestones/<uuid:milestone_id>/", views.MilestoneDetailView.as_view(), name="milestone-detail"),
    path("milestones/<uuid:milestone_id>/start/", views.StartMilestoneView.as_view(), name="milestone-start"),
    path(
        "milestones/<uuid:milestone_id>/complete/",
        views.CompleteMilestoneView.as_view(),
        name="milestone-complete",
    ),
    path(
        "milestones/<uuid:milestone_id>/payment-status/",
        views.MilestonePaymentStatusView.as_view(),
        name="milestone-payment-status",
    ),
]
