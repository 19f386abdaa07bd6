"""
Tests for the email-based UserManager.
"""

import pytest

from authentication.models import User


@pytest.mark.django_db
class TestCreateUser:
    def test_normalizes_email_domain(self):
        user = User.objects.create_user(email="Someone@EXAMPLE.com", password="pw12345!")

        assert user.email == "Someone@example.com"
        assert user.check_password("pw12345!")

    def test_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="pw")

    def test_without_password_is_unusable(self):
        user = User.objects.create_user(email="nopw@example.com")

        assert not user.has_usable_password()

    def test_artist_flag_is_stored(self):
        user = User.objects.create_user(email="artist@example.com", is_artist=True)

        assert User.objects.get(pk=user.pk).is_artist is True

    def test_display_name_falls_back_to_email(self):
        user = User.objects.create_user(email="painter@example.com")

        assert user.display_name == "painter"


@pytest.mark.django_db
class TestCreateSuperuser:
    def test_sets_staff_flags(self):
        admin = User.objects.create_superuser(email="admin@example.com", password="pw")

        assert admin.is_staff
        assert admin.is_superuser

    def test_rejects_non_staff_superuser(self):
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="admin2@example.com", password="pw", is_staff=False
            )
