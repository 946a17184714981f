import random


class DiceRoller:
    """Rolls dice used as table indices. Pass a seeded ``random.Random`` for repeatable rolls."""

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    @classmethod
    def seeded(cls, seed):
        return cls(random.Random(seed))

    def roll(self, sides: int) -> int:
        if sides < 1:
            raise ValueError(f"A die needs at least one side, got {sides}")
        return self.rng.randint(1, sides)


_default_roller = DiceRoller()


def roll_die(sides: int) -> int:
    """Roll a single die with the shared default roller."""
    return _default_roller.roll(sides)
