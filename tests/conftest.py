from datetime import timezone

import pytest

from stddrinks.calculations import EliminationProfile, Sex


@pytest.fixture
def profile():
    return EliminationProfile(first_hour_burn=2.0, subsequent_hour_burn=1.0, weight_kg=80.0, sex=Sex.MALE)


@pytest.fixture
def utc():
    return timezone.utc
