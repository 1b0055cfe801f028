"""Unit tests for eligibility and recipient lookups."""

from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from email_queue.exceptions import EligibilityReadError
from email_queue.models import EligibilitySetting
from email_queue.repositories import EligibilityRepository, RecipientRepository
from tests.fakes import make_eligible_user


class TestEligibilityRepository(TestCase):
    """Tests for reading users due a digest."""

    def setUp(self):
        make_eligible_user("u1", time_slot="14:00")
        make_eligible_user("u2", time_slot="14:00")
        make_eligible_user("u3", time_slot="15:00")
        make_eligible_user("u4", time_slot="14:00", enabled=False)

    def test_reads_enabled_users_for_slot(self):
        users = EligibilityRepository.read_eligibility("14:00")
        self.assertEqual([u.user_id for u in users], ["u1", "u2"])
        self.assertEqual(users[0].email, "u1@example.com")
        self.assertEqual(users[0].settings_snapshot["time_slot"], "14:00")

    def test_read_all_enabled_ignores_slot(self):
        users = EligibilityRepository.read_all_enabled()
        self.assertEqual([u.user_id for u in users], ["u1", "u2", "u3"])

    def test_skips_users_without_address(self):
        make_eligible_user("u5", time_slot="14:00", email=None)
        users = EligibilityRepository.read_eligibility("14:00")
        self.assertNotIn("u5", [u.user_id for u in users])

    def test_wraps_database_errors(self):
        with patch.object(
            EligibilitySetting.objects, "filter", side_effect=DatabaseError("down")
        ):
            with self.assertRaises(EligibilityReadError) as ctx:
                EligibilityRepository.read_eligibility("14:00")
        self.assertEqual(ctx.exception.time_slot, "14:00")


class TestRecipientRepository(TestCase):
    """Tests for recipient resolution."""

    def test_resolves_known_user(self):
        make_eligible_user("u1")
        recipient = RecipientRepository.resolve_recipient("u1")
        self.assertEqual(recipient.email, "u1@example.com")
        self.assertEqual(recipient.full_name, "User u1")

    def test_unknown_user_is_none(self):
        self.assertIsNone(RecipientRepository.resolve_recipient("ghost"))

    def test_blank_email_is_none(self):
        make_eligible_user("u2", email="")
        self.assertIsNone(RecipientRepository.resolve_recipient("u2"))
