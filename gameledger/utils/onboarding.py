# gameledger/utils/onboarding.py
"""
Onboarding wizard state machine.

The wizard runs through five linear steps. Its position is stored on the
profile (`onboarding_step`, 0 when the wizard is not running) so every
request sees the same state.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from gameledger.models.profile import Profile
from gameledger.utils.gamification import grant

ONBOARDING_STEPS = ["welcome", "goal", "category", "first_transaction", "gamification"]
TOTAL_STEPS = len(ONBOARDING_STEPS)

COMPLETION_COINS = 100
COMPLETION_EXP = 200


class OnboardingError(Exception):
    """Raised for transitions the current onboarding state does not allow."""


def step_name(step: int) -> Optional[str]:
    if 1 <= step <= TOTAL_STEPS:
        return ONBOARDING_STEPS[step - 1]
    return None

def is_active(profile: Profile) -> bool:
    return 1 <= (profile.onboarding_step or 0) <= TOTAL_STEPS

def should_auto_start(profile: Profile, auto_start_minutes: int, now: Optional[datetime] = None) -> bool:
    """A freshly created profile that has not finished onboarding gets the wizard."""
    if profile.onboarding_completed or is_active(profile) or profile.created_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    created_at = profile.created_at
    # SQLite hands back naive datetimes; they are stored as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return now - created_at < timedelta(minutes=auto_start_minutes)

def start(profile: Profile) -> None:
    profile.onboarding_step = 1

def _require_active(profile: Profile) -> None:
    if not is_active(profile):
        raise OnboardingError("Onboarding is not in progress")

def next_step(profile: Profile) -> None:
    _require_active(profile)
    if profile.onboarding_step < TOTAL_STEPS:
        profile.onboarding_step += 1

def prev_step(profile: Profile) -> None:
    _require_active(profile)
    if profile.onboarding_step > 1:
        profile.onboarding_step -= 1

def complete(profile: Profile, now: Optional[datetime] = None) -> None:
    """Finish the wizard and pay out the completion bonus exactly once."""
    if profile.onboarding_completed:
        raise OnboardingError("Onboarding already completed")
    profile.onboarding_completed = True
    profile.onboarding_completed_at = now or datetime.now(timezone.utc)
    profile.onboarding_step = 0
    grant(profile, exp=COMPLETION_EXP, coins=COMPLETION_COINS)

def skip(profile: Profile, now: Optional[datetime] = None) -> None:
    if profile.onboarding_completed:
        raise OnboardingError("Onboarding already completed")
    profile.onboarding_completed = True
    profile.onboarding_skipped = True
    profile.onboarding_completed_at = now or datetime.now(timezone.utc)
    profile.onboarding_step = 0
