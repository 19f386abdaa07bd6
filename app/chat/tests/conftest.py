"""
Test configuration and fixtures for chat tests.
"""

import pytest

from authentication.tests.factories import ArtistFactory, UserFactory
from chat.tests.factories import ConversationFactory


@pytest.fixture
def client_user(db):
    return UserFactory()


@pytest.fixture
def artist(db):
    return ArtistFactory()


@pytest.fixture
def other_user(db):
    return UserFactory()


@pytest.fixture
def conversation(client_user, artist):
    """Conversation between the client and the artist."""
    return ConversationFactory(users=[client_user, artist])
