"""
Arcade rendering and human play for Inverse Invader

The simulation uses screen coordinates (y down); Arcade draws with y up,
so every draw call goes through ``_sy``.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Set

import numpy as np
import arcade

from . import constants as C
from .entities import EnemyKind
from .simulation import GameState, InvaderGame, Intents
from .utils import clamp

LEFT_KEYS = {arcade.key.LEFT}
RIGHT_KEYS = {arcade.key.RIGHT}
FIRE_KEYS = {arcade.key.SPACE}
DEPLOY_KEYS = {arcade.key.Z, arcade.key.LSHIFT, arcade.key.RSHIFT}
START_KEYS = {arcade.key.RETURN, arcade.key.ENTER}

STAR_COUNT = 100
COCKPIT_C = (51, 51, 51)
TRAIL_ALPHA = 102


class InvaderWindow(arcade.Window):
    """Arcade window drawing an InvaderGame; optionally drives it from the keyboard"""

    def __init__(self, game: InvaderGame, visible: bool = True, interactive: bool = True):
        super().__init__(int(game.width), int(game.height), "Inverse Invader", visible=visible)
        self.game = game
        self.interactive = interactive
        self.keys: Set[int] = set()
        self._accumulator = 0.0

        self.BG = (5, 5, 16)
        self.HUD_C = (220, 220, 220)

        self._stars_rng = random.Random(0)
        self.stars = [
            [self._stars_rng.random() * self.width,
             self._stars_rng.random() * self.height,
             self._stars_rng.random() * 2,
             self._stars_rng.random() * 0.5 + 0.1]
            for _ in range(STAR_COUNT)
        ]

    def _sy(self, y: float) -> float:
        return self.height - y

    # ----------------------------
    # Input
    # ----------------------------

    def intents(self) -> Intents:
        return Intents(
            left=bool(self.keys & LEFT_KEYS),
            right=bool(self.keys & RIGHT_KEYS),
            fire=bool(self.keys & FIRE_KEYS),
            deploy=bool(self.keys & DEPLOY_KEYS),
        )

    def on_key_press(self, symbol: int, modifiers: int):
        self.keys.add(symbol)
        # A passive window never restarts the round it is showing
        if not self.interactive:
            return
        if symbol in START_KEYS and self.game.state != GameState.ACTIVE:
            if self.game.game_over:
                self.game.reset()
            else:
                self.game.start()

    def on_key_release(self, symbol: int, modifiers: int):
        self.keys.discard(symbol)

    def on_update(self, delta_time: float):
        if not self.interactive:
            return
        self._update_stars()
        # Fixed timestep, capped so a stall does not replay a burst of ticks
        self._accumulator = min(self._accumulator + delta_time, 0.25)
        step = 1.0 / C.FPS
        while self._accumulator >= step:
            self._accumulator -= step
            self.game.advance(self.intents())

    def _update_stars(self):
        for star in self.stars:
            star[1] -= star[3] * 2
            if star[1] < 0:
                star[1] = self.height
                star[0] = self._stars_rng.random() * self.width

    # ----------------------------
    # Drawing
    # ----------------------------

    def on_draw(self):
        self.clear()
        arcade.set_background_color(self.BG)

        for x, y, size, _ in self.stars:
            if size > 0.3:
                arcade.draw_circle_filled(x, self._sy(y), size, (255, 255, 255))

        game = self.game
        if game.player is not None and game.state != GameState.IDLE:
            self._draw_player()
            for m in game.minions:
                self._draw_minion(m)
            for e in game.enemies:
                if e.kind == EnemyKind.FIGHTER:
                    self._draw_fighter(e)
                else:
                    self._draw_bunker(e)
            for p in game.projectiles:
                self._draw_projectile(p)
            for p in game.particles:
                color = (*p.color, int(255 * p.alpha))
                arcade.draw_circle_filled(p.x, self._sy(p.y), p.size, color)
            self._draw_hud()

        if game.state == GameState.IDLE:
            self._draw_banner("INVERSE INVADER", "Press ENTER to start")
        elif game.game_over and game.result is not None:
            color = C.COLOR_MOTHERSHIP if game.result.win else C.COLOR_FIGHTER
            self._draw_banner(
                game.result.title,
                f"{game.result.reason}  Final score: {game.result.score}  (ENTER to restart)",
                color,
            )

    def _draw_player(self):
        s = self.game.player
        top, bottom = self._sy(s.y), self._sy(s.y + s.height)
        arcade.draw_polygon_filled(
            [(s.x, top), (s.x + s.width, top),
             (s.x + s.width - 20, bottom), (s.x + 20, bottom)],
            C.COLOR_MOTHERSHIP,
        )
        arcade.draw_circle_filled(s.x + s.width / 2, self._sy(s.y + 10), 15, (255, 255, 255))

    def _draw_minion(self, m):
        cx, cy = m.x + m.width / 2, self._sy(m.y + m.height / 2)
        arcade.draw_circle_filled(cx, cy, m.width / 2, C.COLOR_MINION)
        arcade.draw_circle_filled(cx, cy, m.width / 4, (255, 255, 255))

    def _draw_fighter(self, f):
        arcade.draw_polygon_filled(
            [(f.x + f.width / 2, self._sy(f.y)),
             (f.x + f.width, self._sy(f.y + f.height)),
             (f.x + f.width / 2, self._sy(f.y + f.height - 10)),
             (f.x, self._sy(f.y + f.height))],
            C.COLOR_FIGHTER,
        )
        # Cockpit
        cx = f.x + f.width / 2
        arcade.draw_triangle_filled(
            cx, self._sy(f.y + 10), cx + 5, self._sy(f.y + 25), cx - 5, self._sy(f.y + 25),
            COCKPIT_C,
        )

    def _draw_bunker(self, b):
        arcade.draw_lrbt_rectangle_filled(
            b.x, b.x + b.width, self._sy(b.y + b.height), self._sy(b.y + 10), (85, 85, 85)
        )
        # Dome turret and barrel
        cx, cy = b.x + b.width / 2, self._sy(b.y + 20)
        dome = [(cx + 15 * math.cos(a), cy + 15 * math.sin(a))
                for a in np.linspace(0.0, math.pi, 16)]
        arcade.draw_polygon_filled(dome, C.COLOR_BUNKER)
        arcade.draw_lrbt_rectangle_filled(cx - 4, cx + 4, self._sy(b.y + 20), self._sy(b.y), COCKPIT_C)
        # Health bar
        fill = b.width * b.health_fraction
        if fill > 0:
            arcade.draw_lrbt_rectangle_filled(
                b.x, b.x + fill, self._sy(b.y - 2), self._sy(b.y - 5), C.COLOR_MOTHERSHIP
            )

    def _draw_projectile(self, p):
        left = p.x - p.width / 2
        arcade.draw_lrbt_rectangle_filled(
            left, left + p.width, self._sy(p.y + p.height), self._sy(p.y), p.color
        )
        # Faint trail pointing back along the flight path
        if p.speed > 0:
            base, tip = p.y, p.y - p.height * 3
        else:
            base, tip = p.y + p.height, p.y + p.height * 3
        arcade.draw_triangle_filled(
            left, self._sy(base), left + p.width, self._sy(base), p.x, self._sy(tip),
            (*p.color, TRAIL_ALPHA),
        )

    def _draw_hud(self):
        snap = self.game.snapshot()
        ready = " READY" if snap.stock_ready else ""
        txt = (f"LIFE: {snap.health}  MINIONS: {snap.active_minions}  "
               f"STOCK: {snap.stock}{ready}  SCORE: {snap.score}  "
               f"FIGHTER: {snap.fighter_label}  BUNKERS: {snap.bunkers_remaining}")
        arcade.draw_text(txt, 12, 12, self.HUD_C, 12)

        # Cooldown bar
        bar_w, bar_h = 180, 8
        x0, y0 = self.width - bar_w - 12, 14
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        pct = clamp(snap.cooldown_ready, 0.0, 1.0)
        if pct > 0:
            color = C.COLOR_MOTHERSHIP if pct == 1 else (85, 85, 0)
            arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w * pct, y0, y0 + bar_h, color)

    def _draw_banner(self, title: str, subtitle: str, color=C.COLOR_MOTHERSHIP):
        cx, cy = self.width / 2, self.height / 2
        arcade.draw_text(title, cx, cy + 20, color, 32, anchor_x="center")
        arcade.draw_text(subtitle, cx, cy - 20, self.HUD_C, 14, anchor_x="center")

    def capture_rgb_array(self) -> np.ndarray:
        """Draw the current frame and return it as an (H, W, 3) uint8 array."""
        self.switch_to()
        self.on_draw()
        image = arcade.get_image(0, 0, int(self.width), int(self.height))
        return np.asarray(image.convert("RGB"), dtype=np.uint8)


def play(width: int = C.WIDTH, height: int = C.HEIGHT, seed: Optional[int] = None):
    """Open a window and play with the keyboard."""
    game = InvaderGame(width, height, rng=random.Random(seed))
    InvaderWindow(game)
    arcade.run()


if __name__ == "__main__":
    play()
