from __future__ import annotations

import pytest

from worktime_engine.calculation.factory import PausePolicyFactory
from worktime_engine.calculation.policies.banded_policy import BandedPausePolicy
from worktime_engine.calculation.policies.disabled_policy import NoAutoPausePolicy
from worktime_engine.settings.model import PauseBand, WorkSettings


@pytest.mark.parametrize(
    "gross, required",
    [(0, 0), (359, 0), (360, 30), (390, 30), (539, 30), (540, 45), (720, 45)],
)
def test_default_bands(gross, required):
    assert BandedPausePolicy().required_pause_minutes(gross) == required


def test_custom_bands_are_sorted():
    policy = BandedPausePolicy([PauseBand(480, 40), PauseBand(300, 20)])

    assert policy.required_pause_minutes(310) == 20
    assert policy.required_pause_minutes(500) == 40
    assert [b.after_minutes for b in policy.bands] == [300, 480]


def test_factory_picks_policy_from_settings():
    factory = PausePolicyFactory()

    assert isinstance(factory.for_settings(WorkSettings()), BandedPausePolicy)
    disabled = factory.for_settings(WorkSettings(auto_pause_enabled=False))
    assert isinstance(disabled, NoAutoPausePolicy)
    assert disabled.required_pause_minutes(600) == 0
