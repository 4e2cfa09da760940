"""
InvaderGame - the Inverse Invader simulation core
-------------------------------------------------
- Explicit game state, no rendering or input bindings
- One ``advance(intents)`` call per tick, driven by any scheduler
  (Arcade window, Gymnasium env, tests, replays)
- Fixed update order: player, minions, enemies, projectiles, particles,
  collisions, terminal check
- Removal is always an end-of-phase list filter
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from . import constants as C
from .entities import (
    Bunker,
    Enemy,
    EnemyKind,
    Fighter,
    Minion,
    Mothership,
    Particle,
    Projectile,
)
from .utils import rect_collide

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    OVER = "over"


@dataclass(frozen=True)
class Intents:
    """Boolean player intents for one tick"""
    left: bool = False
    right: bool = False
    fire: bool = False
    deploy: bool = False

    @classmethod
    def from_action(cls, action: Sequence[int]) -> "Intents":
        """Decode a [left, right, fire, deploy] 0/1 vector."""
        if len(action) != 4:
            raise ValueError(f"Expected 4 action components, got {len(action)}")
        left, right, fire, deploy = (bool(int(a)) for a in action)
        return cls(left=left, right=right, fire=fire, deploy=deploy)


@dataclass(frozen=True)
class RoundResult:
    win: bool
    reason: str
    score: int

    @property
    def title(self) -> str:
        return C.TITLE_WIN if self.win else C.TITLE_LOSS


@dataclass(frozen=True)
class HudSnapshot:
    """Read-only view handed to the UI each tick"""
    health: int
    stock: int
    stock_ready: bool
    active_minions: int
    fighter_life: Optional[int]
    bunkers_remaining: int
    score: int
    cooldown_ready: float
    state: GameState
    result: Optional[RoundResult] = None

    @property
    def fighter_label(self) -> str:
        return C.FIGHTER_DESTROYED_LABEL if self.fighter_life is None else str(self.fighter_life)


def bunker_positions(width: float) -> List[float]:
    """Evenly spaced bunker x positions with a 10% margin on each side."""
    margin = width * C.BUNKER_MARGIN_FRAC
    spacing = (width - margin * 2) / (C.BUNKER_COUNT - 1)
    return [margin + i * spacing for i in range(C.BUNKER_COUNT)]


def build_roster(width: float, height: float) -> List[Enemy]:
    """One fighter followed by the four bunkers."""
    enemies: List[Enemy] = [Fighter.spawn(width, height)]
    y = height - C.BUNKER_Y_OFFSET
    for slot, x in enumerate(bunker_positions(width)):
        enemies.append(Bunker(x=x, y=y, slot=slot))
    return enemies


def _new_events() -> Dict[str, float]:
    return {
        "shots": 0.0,
        "deployed": 0.0,
        "hits": 0.0,
        "kamikaze": 0.0,
        "minions_lost": 0.0,
        "damage": 0.0,
        "score": 0.0,
    }


class InvaderGame:
    """Inverse Invader simulation state and tick function"""

    def __init__(
        self,
        width: float = C.WIDTH,
        height: float = C.HEIGHT,
        rng: Optional[random.Random] = None,
    ):
        assert width > C.MOTHERSHIP_SIZE[0] and height > C.BUNKER_Y_OFFSET + C.BUNKER_SIZE[1], \
            "Play area is too small for the fixed roster."
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else random.Random()

        self.state = GameState.IDLE
        self.score = 0
        self.tick = 0
        self.result: Optional[RoundResult] = None

        # World state
        self.player: Optional[Mothership] = None
        self.minions: List[Minion] = []
        self.enemies: List[Enemy] = []
        self.projectiles: List[Projectile] = []
        self.particles: List[Particle] = []

        # Per-tick event counters for reward/metrics
        self.events: Dict[str, float] = _new_events()

    # ----------------------------
    # State machine
    # ----------------------------

    @property
    def game_active(self) -> bool:
        return self.state == GameState.ACTIVE

    @property
    def game_over(self) -> bool:
        return self.state == GameState.OVER

    def start(self):
        self.state = GameState.ACTIVE
        self.score = 0
        self.tick = 0
        self.result = None
        self.events = _new_events()

        self.projectiles = []
        self.particles = []
        self.minions = []

        self.player = Mothership.spawn(self.width)
        self.enemies = build_roster(self.width, self.height)
        logger.info("Round started (%dx%d, %d enemies)", self.width, self.height, len(self.enemies))

    def reset(self):
        self.start()

    def end_game(self, win: bool, reason: str):
        if self.state != GameState.ACTIVE:
            return
        self.state = GameState.OVER
        self.result = RoundResult(win=win, reason=reason, score=self.score)
        logger.info("Round over after %d ticks: %s (score %d)", self.tick, reason, self.score)

    # ----------------------------
    # Tick
    # ----------------------------

    @property
    def elapsed_ms(self) -> float:
        return self.tick * C.FRAME_MS

    def advance(self, intents: Optional[Intents] = None) -> bool:
        """Run one tick. Returns False when the round is not active."""
        if not self.game_active:
            return False
        if intents is None:
            intents = Intents()

        self.events = _new_events()
        self.tick += 1

        self.player.update(intents, self)

        for minion in self.minions:
            if minion.marked_for_deletion:
                continue
            minion.update(self.width)
        self.minions = [m for m in self.minions if not m.marked_for_deletion]

        if any(m.y > self.height for m in self.minions):
            self.end_game(True, C.REASON_BREACH)
            return True

        for enemy in self.enemies:
            if enemy.marked_for_deletion:
                continue
            enemy.update(self)
        self.enemies = [e for e in self.enemies if not e.marked_for_deletion]

        if not self.enemies:
            self.end_game(True, C.REASON_ELIMINATED)
            return True

        for projectile in self.projectiles:
            if projectile.marked_for_deletion:
                continue
            projectile.update(self.height)
        self.projectiles = [p for p in self.projectiles if not p.marked_for_deletion]

        for particle in self.particles:
            if particle.marked_for_deletion:
                continue
            particle.update()
        self.particles = [p for p in self.particles if not p.marked_for_deletion]

        self.check_collisions()

        if self.player.life <= 0:
            self.end_game(False, C.REASON_DESTROYED)
        return True

    # ----------------------------
    # Collisions
    # ----------------------------

    def check_collisions(self):
        for proj in self.projectiles:
            if proj.friendly:
                # Removal flag is consulted per enemy
                for enemy in self.enemies:
                    if not proj.marked_for_deletion and rect_collide(proj, enemy):
                        proj.marked_for_deletion = True
                        enemy.take_damage(1)
                        self.create_explosion(proj.x, proj.y, C.COLOR_BULLET_PLAYER, C.BURST_HIT)
                        self._award(C.SCORE_PROJECTILE_HIT)
                        self.events["hits"] += 1

                # Friendly fire
                for minion in self.minions:
                    if rect_collide(proj, minion):
                        proj.marked_for_deletion = True
                        self._hit_minion(minion)
            else:
                if rect_collide(proj, self.player):
                    proj.marked_for_deletion = True
                    self.player.take_damage(1)
                    self.create_explosion(proj.x, proj.y, C.COLOR_IMPACT, C.BURST_HIT)
                    self.events["damage"] += 1

                for minion in self.minions:
                    if rect_collide(proj, minion):
                        proj.marked_for_deletion = True
                        self._hit_minion(minion)

        # Kamikaze
        for minion in self.minions:
            for enemy in self.enemies:
                if rect_collide(minion, enemy):
                    minion.take_damage(1)
                    enemy.take_damage(1)
                    self.create_explosion(minion.x, minion.y, C.COLOR_MINION, C.BURST_KAMIKAZE)
                    self._award(C.SCORE_KAMIKAZE)
                    self.events["kamikaze"] += 1

    def _hit_minion(self, minion: Minion):
        # Every overlapping shot bursts; a minion is only lost once
        was_alive = not minion.marked_for_deletion
        minion.take_damage(1)
        self.create_explosion(minion.x, minion.y, C.COLOR_MINION, C.BURST_MINION)
        if was_alive:
            self.events["minions_lost"] += 1

    def _award(self, points: int):
        self.score += points
        self.events["score"] += points

    def create_explosion(self, x: float, y: float, color, count: int = 10):
        for _ in range(count):
            self.particles.append(Particle.spawn(x, y, color, self.rng))

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def fighter(self) -> Optional[Fighter]:
        for enemy in self.enemies:
            if enemy.kind == EnemyKind.FIGHTER:
                return enemy  # type: ignore[return-value]
        return None

    @property
    def bunkers(self) -> List[Bunker]:
        return [e for e in self.enemies if e.kind == EnemyKind.BUNKER]  # type: ignore[misc]

    def snapshot(self) -> Optional[HudSnapshot]:
        if self.player is None:
            return None
        fighter = self.fighter
        return HudSnapshot(
            health=self.player.life,
            stock=self.player.stock,
            stock_ready=self.player.stock > 0,
            active_minions=len(self.minions),
            fighter_life=fighter.life if fighter is not None else None,
            bunkers_remaining=len(self.bunkers),
            score=self.score,
            cooldown_ready=self.player.cooldown_ready,
            state=self.state,
            result=self.result,
        )
