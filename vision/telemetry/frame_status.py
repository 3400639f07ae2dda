"""Per-frame telemetry record."""

from dataclasses import asdict, dataclass, field

from .hero_tracker import HeroSighting


@dataclass
class FrameStatus:
    """Everything read from one frame."""
    ts: int                                  # ms since capture start
    joystick_angle: float | None = None      # degrees, None when no knob seen
    spell1_cd: int = 0
    spell2_cd: int = 0
    spell3_cd: int = 0
    skill1_cd: int = 0
    skill2_cd: int = 0
    skill3_cd: int = 0
    skill4_cd: int = 0
    money: int = 0
    heroes: list[HeroSighting] = field(default_factory=list)

    @property
    def spell_cooldowns(self) -> tuple[int, int, int]:
        return self.spell1_cd, self.spell2_cd, self.spell3_cd

    @property
    def skill_cooldowns(self) -> tuple[int, int, int, int]:
        return self.skill1_cd, self.skill2_cd, self.skill3_cd, self.skill4_cd

    def to_dict(self) -> dict:
        return asdict(self)
