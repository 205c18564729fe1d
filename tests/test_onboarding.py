# tests/test_onboarding.py
import unittest
from datetime import datetime, timedelta, timezone

from gameledger.models.profile import Profile
from gameledger.utils import onboarding
from gameledger.utils.onboarding import OnboardingError


def new_profile(**overrides) -> Profile:
    fields = dict(
        level=1,
        total_exp=0,
        coins=0,
        onboarding_step=0,
        onboarding_completed=False,
        onboarding_skipped=False,
        created_at=datetime.now(timezone.utc),
    )
    fields.update(overrides)
    return Profile(**fields)


class TestOnboardingSteps(unittest.TestCase):
    def test_step_names(self):
        self.assertEqual(onboarding.step_name(1), "welcome")
        self.assertEqual(onboarding.step_name(5), "gamification")
        self.assertIsNone(onboarding.step_name(0))
        self.assertIsNone(onboarding.step_name(6))

    def test_walks_forward_and_stops_at_last_step(self):
        profile = new_profile()
        onboarding.start(profile)
        self.assertEqual(profile.onboarding_step, 1)

        for _ in range(10):
            onboarding.next_step(profile)
        self.assertEqual(profile.onboarding_step, onboarding.TOTAL_STEPS)

    def test_prev_stops_at_first_step(self):
        profile = new_profile(onboarding_step=2)
        onboarding.prev_step(profile)
        onboarding.prev_step(profile)
        self.assertEqual(profile.onboarding_step, 1)

    def test_moving_while_inactive_is_rejected(self):
        profile = new_profile()
        with self.assertRaises(OnboardingError):
            onboarding.next_step(profile)
        with self.assertRaises(OnboardingError):
            onboarding.prev_step(profile)


class TestOnboardingFinish(unittest.TestCase):
    def test_complete_pays_bonus_once(self):
        profile = new_profile(onboarding_step=5, total_exp=900)
        onboarding.complete(profile)

        self.assertTrue(profile.onboarding_completed)
        self.assertFalse(profile.onboarding_skipped)
        self.assertEqual(profile.onboarding_step, 0)
        self.assertIsNotNone(profile.onboarding_completed_at)
        self.assertEqual(profile.coins, onboarding.COMPLETION_COINS)
        self.assertEqual(profile.total_exp, 900 + onboarding.COMPLETION_EXP)
        self.assertEqual(profile.level, 2)

        with self.assertRaises(OnboardingError):
            onboarding.complete(profile)
        self.assertEqual(profile.coins, onboarding.COMPLETION_COINS)

    def test_skip_marks_completed_without_bonus(self):
        profile = new_profile(onboarding_step=3)
        onboarding.skip(profile)

        self.assertTrue(profile.onboarding_completed)
        self.assertTrue(profile.onboarding_skipped)
        self.assertEqual(profile.onboarding_step, 0)
        self.assertEqual(profile.coins, 0)
        self.assertEqual(profile.total_exp, 0)

    def test_skip_after_complete_is_rejected(self):
        profile = new_profile(onboarding_step=1)
        onboarding.complete(profile)
        with self.assertRaises(OnboardingError):
            onboarding.skip(profile)


class TestAutoStart(unittest.TestCase):
    def setUp(self):
        self.now = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

    def test_fresh_profile_auto_starts(self):
        profile = new_profile(created_at=self.now - timedelta(minutes=2))
        self.assertTrue(onboarding.should_auto_start(profile, 5, now=self.now))

    def test_old_profile_does_not_auto_start(self):
        profile = new_profile(created_at=self.now - timedelta(minutes=10))
        self.assertFalse(onboarding.should_auto_start(profile, 5, now=self.now))

    def test_naive_created_at_is_read_as_utc(self):
        naive = (self.now - timedelta(minutes=1)).replace(tzinfo=None)
        profile = new_profile(created_at=naive)
        self.assertTrue(onboarding.should_auto_start(profile, 5, now=self.now))

    def test_completed_or_running_wizard_does_not_restart(self):
        done = new_profile(created_at=self.now, onboarding_completed=True)
        running = new_profile(created_at=self.now, onboarding_step=3)
        self.assertFalse(onboarding.should_auto_start(done, 5, now=self.now))
        self.assertFalse(onboarding.should_auto_start(running, 5, now=self.now))


if __name__ == "__main__":
    unittest.main()
