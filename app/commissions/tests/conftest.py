"""
Test configuration and fixtures for commission tests.

Usage:
    def test_example(commission, artist_client):
        response = artist_client.post(f"/api/v1/commissions/{commission.id}/accept/")
        assert response.status_code == 200
"""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import ArtistFactory, UserFactory
from commissions.models import Commission
from commissions.state_machines import CommissionStatus, MilestoneStage
from commissions.tests.factories import CommissionFactory, MilestoneStageTemplateFactory


def _jwt_client(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def client_user(db):
    """The account paying for the commission."""
    return UserFactory()


@pytest.fixture
def artist(db):
    return ArtistFactory()


@pytest.fixture
def other_user(db):
    """Neither client nor artist."""
    return UserFactory()


@pytest.fixture
def commission(client_user, artist):
    """Pending commission with a 100.00 budget."""
    return CommissionFactory(client=client_user, artist=artist)


@pytest.fixture
def active_commission(client_user, artist):
    """In-progress commission priced at 1000.00."""
    return CommissionFactory(
        client=client_user,
        artist=artist,
        status=CommissionStatus.IN_PROGRESS,
        final_price=Decimal("1000.00"),
    )


@pytest.fixture
def stage_templates(db):
    """The four default stages at 25% each."""
    stages = [
        MilestoneStage.SKETCH,
        MilestoneStage.LINE_ART,
        MilestoneStage.BASE_COLORS,
        MilestoneStage.SHADING,
    ]
    return [
        MilestoneStageTemplateFactory(stage=stage, typical_order=order)
        for order, stage in enumerate(stages, start=1)
    ]


@pytest.fixture
def reload():
    """Re-fetch a commission (FSM-protected status rules out refresh_from_db)."""

    def _reload(commission):
        return Commission.objects.get(pk=commission.pk)

    return _reload


@pytest.fixture
def client_api(client_user):
    return _jwt_client(client_user)


@pytest.fixture
def artist_api(artist):
    return _jwt_client(artist)


@pytest.fixture
def other_api(other_user):
    return _jwt_client(other_user)


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()
