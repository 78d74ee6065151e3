"""
Tests for the per-animal disease state machine.
"""

from habitat.disease import Disease
from habitat.rng import make_rng


class FixedDraw:
    """Generator stand-in whose random() always returns the same value"""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def run_infection(draw: float, duration: int = 5, mortality_rate: float = 0.3, immune: bool = False):
    disease = Disease()
    disease.infect()
    for day in range(duration):
        assert not disease.is_due(duration)
        disease.progress()
        assert disease.days_infected == day + 1
    assert disease.is_due(duration)
    fatal = disease.resolve(FixedDraw(draw), mortality_rate, immune)
    return disease, fatal


def test_fatal_resolution():
    """Mortality draw below the rate kills"""
    disease, fatal = run_infection(draw=0.1)
    print(f"Fatal: {fatal}, state: {disease.to_dict()}")
    assert fatal is True


def test_recovery_resets_state():
    """Mortality draw above the rate recovers with days reset"""
    disease, fatal = run_infection(draw=0.9)
    assert fatal is False
    assert disease.infected is False
    assert disease.days_infected == 0
    assert disease.immune is False
    assert disease.susceptible


def test_recovery_with_immunity():
    disease, fatal = run_infection(draw=0.9, immune=True)
    assert fatal is False
    assert disease.immune is True
    assert not disease.susceptible

    # Immune animals never catch it again
    assert disease.try_infect(make_rng(0), 1.0) is False
    assert disease.infected is False


def test_try_infect_probabilities():
    rng = make_rng(3)

    never = Disease()
    for _ in range(100):
        assert never.try_infect(rng, 0.0) is False

    always = Disease()
    assert always.try_infect(rng, 1.0) is True
    assert always.infected
    assert always.days_infected == 0

    # Already infected: no draw, no reset
    always.progress()
    assert always.try_infect(rng, 1.0) is False
    assert always.days_infected == 1


def test_progress_ignored_while_healthy():
    disease = Disease()
    disease.progress()
    assert disease.days_infected == 0
    assert not disease.is_due(0)
