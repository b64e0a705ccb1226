"""Volume spike and displacement detection."""

from typing import Sequence

from playbook_agent.schemas import Candle, VolumeResult

AVERAGE_WINDOW = 10
SPIKE_MULTIPLIER = 1.5
DISPLACEMENT_BODY_RATIO = 0.7


def detect_volume(candles: Sequence[Candle]) -> VolumeResult:
    """
    Compare the latest bar's volume with the average of up to
    ``AVERAGE_WINDOW`` preceding bars (the latest bar is excluded).

    A displacement is a spike whose candle body covers at least 70% of
    its range. Missing volume counts as zero.
    """
    if len(candles) < 2:
        return VolumeResult()

    current = candles[-1]
    prior = candles[-AVERAGE_WINDOW - 1:-1]
    average = sum(c.volume or 0.0 for c in prior) / len(prior)
    spike = average > 0 and (current.volume or 0.0) > SPIKE_MULTIPLIER * average
    displacement = spike and current.range > 0 and current.body / current.range >= DISPLACEMENT_BODY_RATIO
    return VolumeResult(spike=spike, displacement=displacement, average=average)
