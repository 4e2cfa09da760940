"""
Game entity dataclasses

Every entity is a rectangular body positioned by its top-left corner in
screen coordinates (y grows downward). Entities that act on the world take
the owning ``InvaderGame`` as an argument and append what they spawn to its
collections; they never hold a reference to it.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Tuple

from . import constants as C
from .utils import clamp, center_x

if TYPE_CHECKING:
    from .simulation import InvaderGame, Intents


@dataclass
class Body:
    """Physical body shared by all entities"""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    marked_for_deletion: bool = False


@dataclass
class Projectile(Body):
    """Linear projectile; positive speed moves down the screen.

    Removed once it reaches the vertical bounds widened by PROJECTILE_MARGIN
    (the boundary itself counts as out).
    """
    width: float = C.PROJECTILE_SIZE[0]
    height: float = C.PROJECTILE_SIZE[1]
    speed: float = 0.0
    friendly: bool = False

    def update(self, height: float):
        self.y += self.speed
        if self.y <= -C.PROJECTILE_MARGIN or self.y >= height + C.PROJECTILE_MARGIN:
            self.marked_for_deletion = True

    @property
    def color(self) -> Tuple[int, int, int]:
        return C.COLOR_BULLET_PLAYER if self.friendly else C.COLOR_BULLET_ENEMY


@dataclass
class Particle(Body):
    """Cosmetic explosion fragment, never collidable"""
    size: float = 2.0
    speed_x: float = 0.0
    speed_y: float = 0.0
    color: Tuple[int, int, int] = C.COLOR_IMPACT
    life: float = C.PARTICLE_LIFE

    @classmethod
    def spawn(cls, x: float, y: float, color, rng: random.Random) -> "Particle":
        size = rng.random() * 4 + 2
        speed_x = rng.random() * 6 - 3
        speed_y = rng.random() * 6 - 3
        return cls(x=x, y=y, size=size, speed_x=speed_x, speed_y=speed_y, color=color)

    def update(self):
        self.x += self.speed_x
        self.y += self.speed_y
        self.life -= C.PARTICLE_DECAY
        if self.life <= 0:
            self.marked_for_deletion = True

    @property
    def alpha(self) -> float:
        return max(0.0, self.life / C.PARTICLE_LIFE)


@dataclass
class Minion(Body):
    """Descending zigzag unit deployed by the mothership"""
    width: float = C.MINION_SIZE[0]
    height: float = C.MINION_SIZE[1]
    speed_y: float = C.MINION_DESCENT_SPEED
    speed_x: float = 1.0
    direction: int = 1
    move_timer: int = 0
    move_timer_limit: float = 60.0

    @classmethod
    def spawn(cls, x: float, y: float, rng: random.Random) -> "Minion":
        speed_x = 0.5 + rng.random() * 2.5
        direction = 1 if rng.random() < 0.5 else -1
        move_timer_limit = 20 + rng.random() * 100
        return cls(x=x, y=y, speed_x=speed_x, direction=direction,
                   move_timer_limit=move_timer_limit)

    def update(self, width: float):
        self.y += self.speed_y
        self.x += self.speed_x * self.direction

        # Zigzag
        self.move_timer += 1
        if self.move_timer > self.move_timer_limit:
            self.direction *= -1
            self.move_timer = 0

        # Bounce off the side walls
        if self.x < 0:
            self.x = 0.0
            self.direction *= -1
        if self.x > width - self.width:
            self.x = width - self.width
            self.direction *= -1

    def take_damage(self, amount: int = 1):
        # one hit kills regardless of amount
        self.marked_for_deletion = True


@dataclass
class Mothership(Body):
    """Player-controlled mothership"""
    width: float = C.MOTHERSHIP_SIZE[0]
    height: float = C.MOTHERSHIP_SIZE[1]
    speed: float = C.MOTHERSHIP_SPEED
    life: int = C.MOTHERSHIP_LIFE
    cooldown_timer: int = 0  # 0 means ready
    stock: int = 0
    stock_timer: int = 0

    @classmethod
    def spawn(cls, arena_width: float) -> "Mothership":
        return cls(x=arena_width / 2 - C.MOTHERSHIP_SIZE[0] / 2, y=C.MOTHERSHIP_Y)

    def update(self, intents: "Intents", game: "InvaderGame"):
        if intents.left:
            self.x -= self.speed
        if intents.right:
            self.x += self.speed
        self.x = clamp(self.x, 0.0, game.width - self.width)

        if intents.fire and self.cooldown_timer <= 0:
            self.shoot(game)
            self.cooldown_timer = C.MOTHERSHIP_COOLDOWN
        if self.cooldown_timer > 0:
            self.cooldown_timer -= 1

        # Stock generation
        self.stock_timer += 1
        if self.stock_timer >= C.MINION_STOCK_INTERVAL:
            self.stock += 1
            self.stock_timer = 0

        if intents.deploy and self.stock > 0:
            self.deploy_minions(game)

    def shoot(self, game: "InvaderGame"):
        game.projectiles.append(Projectile(
            x=center_x(self), y=self.y + self.height,
            speed=C.PLAYER_PROJECTILE_SPEED, friendly=True,
        ))
        game.events["shots"] += 1

    def deploy_minions(self, game: "InvaderGame"):
        """Release the whole stock as minions in a small grid below the hull."""
        cx = center_x(self)
        bottom = self.y + self.height
        for i in range(self.stock):
            offset_x = (i % C.MINION_DEPLOY_COLUMNS) * 10 - 25
            offset_y = (i // C.MINION_DEPLOY_COLUMNS) * 20
            game.minions.append(Minion.spawn(cx + offset_x, bottom + offset_y, game.rng))
        game.events["deployed"] += self.stock
        self.stock = 0
        game.create_explosion(cx, bottom, C.COLOR_MINION, C.BURST_DEPLOY)

    def take_damage(self, amount: int = 1):
        self.life -= amount

    @property
    def cooldown_ready(self) -> float:
        return max(0.0, (C.MOTHERSHIP_COOLDOWN - self.cooldown_timer) / C.MOTHERSHIP_COOLDOWN)


class EnemyKind(str, Enum):
    FIGHTER = "fighter"
    BUNKER = "bunker"


@dataclass
class Enemy(Body, ABC):
    """Common state of the enemy roster; concrete kinds set ``kind``"""
    kind: ClassVar[EnemyKind]
    max_life: int = 3
    life: int = 3
    shoot_timer: int = 0

    def take_damage(self, amount: int = 1):
        self.life -= amount
        if self.life <= 0:
            self.marked_for_deletion = True

    @property
    def health_fraction(self) -> float:
        return max(0.0, self.life / self.max_life)

    @abstractmethod
    def update(self, game: "InvaderGame"):
        ...


@dataclass
class Fighter(Enemy):
    """Mobile enemy: evades player fire, hunts the lowest minion, idles otherwise"""
    width: float = C.FIGHTER_SIZE[0]
    height: float = C.FIGHTER_SIZE[1]
    max_life: int = C.FIGHTER_LIFE
    life: int = C.FIGHTER_LIFE
    speed: float = C.FIGHTER_SPEED

    kind: ClassVar[EnemyKind] = EnemyKind.FIGHTER

    @classmethod
    def spawn(cls, arena_width: float, arena_height: float) -> "Fighter":
        return cls(x=arena_width / 2, y=arena_height - C.FIGHTER_Y_OFFSET)

    def find_threat(self, projectiles) -> "Projectile | None":
        """Last friendly projectile in list order that is bearing down on us."""
        cx = center_x(self)
        danger = None
        for p in projectiles:
            if (p.friendly and p.y < self.y and p.y > 0
                    and abs(p.x - cx) < C.FIGHTER_THREAT_RANGE):
                danger = p
        return danger

    @staticmethod
    def find_target(minions) -> "Minion | None":
        target = None
        max_y = -1.0
        for m in minions:
            if m.y > max_y:
                max_y = m.y
                target = m
        return target

    def update(self, game: "InvaderGame"):
        danger = self.find_threat(game.projectiles)
        target = None if danger is not None else self.find_target(game.minions)

        if danger is not None:
            # Evade
            if danger.x < center_x(self):
                self.x += self.speed
            else:
                self.x -= self.speed
        elif target is not None:
            # Intercept
            fighter_center = center_x(self)
            minion_center = center_x(target)
            if fighter_center < minion_center - C.FIGHTER_DEAD_ZONE:
                self.x += self.speed
            elif fighter_center > minion_center + C.FIGHTER_DEAD_ZONE:
                self.x -= self.speed

            if abs(fighter_center - minion_center) < C.FIGHTER_ALIGN_RANGE:
                if self.shoot_timer > C.FIGHTER_AIMED_DELAY and game.rng.random() < C.FIGHTER_AIMED_CHANCE:
                    self.shoot(game)
                    self.shoot_timer = 0
        else:
            # Idle drift
            self.x += math.sin(game.elapsed_ms / C.FIGHTER_IDLE_PERIOD_MS) * C.FIGHTER_IDLE_AMPLITUDE

        self.x = clamp(self.x, 0.0, game.width - self.width)

        # Background fire; does not reset the timer
        self.shoot_timer += 1
        if self.shoot_timer > C.ENEMY_FIRE_DELAY and game.rng.random() < C.FIGHTER_FIRE_CHANCE:
            self.shoot(game)

    def shoot(self, game: "InvaderGame"):
        game.projectiles.append(Projectile(
            x=center_x(self), y=self.y, speed=C.FIGHTER_PROJECTILE_SPEED, friendly=False,
        ))


@dataclass
class Bunker(Enemy):
    """Stationary turret near the bottom edge"""
    width: float = C.BUNKER_SIZE[0]
    height: float = C.BUNKER_SIZE[1]
    max_life: int = C.BUNKER_LIFE
    life: int = C.BUNKER_LIFE
    slot: int = 0

    kind: ClassVar[EnemyKind] = EnemyKind.BUNKER

    def update(self, game: "InvaderGame"):
        self.shoot_timer += 1
        if self.shoot_timer > C.ENEMY_FIRE_DELAY and game.rng.random() < C.BUNKER_FIRE_CHANCE:
            self.shoot(game)

    def shoot(self, game: "InvaderGame"):
        game.projectiles.append(Projectile(
            x=center_x(self), y=self.y, speed=C.BUNKER_PROJECTILE_SPEED, friendly=False,
        ))
