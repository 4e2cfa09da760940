"""
InvaderEnv - Gymnasium wrapper around the Inverse Invader simulation
--------------------------------------------------------------------
- Headless driver: one ``step`` is one simulation tick
- The agent plays the mothership
- Action space: MultiDiscrete([2, 2, 2, 2]) -> [left, right, fire, deploy]
- Vector observation: mothership state + fighter + bunker slots
  + top-K lowest minions + top-M nearest enemy projectiles
- Rendering is delegated to ``invader.render`` (Arcade), imported lazily
  so the env runs without a display

Quick test:
    python -m invader.invader_env
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from . import constants as C
from .simulation import InvaderGame, Intents
from .utils import clamp, center_x, seed_everything


DEFAULT_REWARD_CONFIG = {
    "R_SCORE": 1.0,      # per 100 points scored
    "R_DAMAGE": 0.5,     # per hit taken
    "R_MINION_LOST": 0.05,
    "R_SHOT": 0.01,
    "R_TIME": 0.001,
    "R_WIN": 10.0,
    "R_LOSS": 10.0,
}


class InvaderEnv(gym.Env):
    """Inverse Invader as a Gymnasium environment"""

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": C.FPS}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = C.WIDTH,
        height: int = C.HEIGHT,
        max_steps: int = 7200,  # two minutes at 60 FPS
        k_minions: int = 5,
        m_projectiles: int = 5,
        reward_config: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Unsupported render_mode: {render_mode}"
        self.render_mode = render_mode

        self.width = width
        self.height = height
        self.max_steps = max_steps
        self.k_minions = k_minions
        self.m_projectiles = m_projectiles
        self.reward_config = dict(DEFAULT_REWARD_CONFIG)
        if reward_config:
            self.reward_config.update({k: v for k, v in reward_config.items() if k.startswith("R_")})

        # [left, right, fire, deploy]
        self.action_space = spaces.MultiDiscrete([2, 2, 2, 2])

        # Mothership: x, health, cooldown, stock, stock phase (5)
        # Fighter: present, x, y, life (4)
        # Bunkers: present, life per slot (2 * BUNKER_COUNT)
        # Each minion: present, x, y (3)
        # Each enemy projectile: present, rel x, rel y (3)
        obs_dim = 5 + 4 + 2 * C.BUNKER_COUNT + 3 * self.k_minions + 3 * self.m_projectiles
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self.game: Optional[InvaderGame] = None
        self._step_count = 0
        self._window = None

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        rng_seed = int(self.np_random.integers(0, 2**31 - 1))
        if self.game is None:
            self.game = InvaderGame(self.width, self.height, rng=random.Random(rng_seed))
        else:
            self.game.rng.seed(rng_seed)
        self.game.start()
        self._step_count = 0

        return self._get_obs(), self._get_info()

    def step(self, action):
        if self.game is None:
            raise RuntimeError("Call reset() before step().")

        ticked = self.game.advance(Intents.from_action(action))

        reward = self._compute_reward() if ticked else 0.0
        terminated = self.game.game_over
        self._step_count += 1
        truncated = self._step_count >= self.max_steps and not terminated

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _get_obs(self) -> np.ndarray:
        game = self.game
        player = game.player
        w, h = float(self.width), float(self.height)

        def unit(v: float) -> float:
            return clamp(v * 2 - 1, -1.0, 1.0)

        obs_parts: List[float] = [
            unit(center_x(player) / w),
            unit(max(0, player.life) / C.MOTHERSHIP_LIFE),
            unit(player.cooldown_ready),
            unit(min(player.stock, 10) / 10.0),
            unit(player.stock_timer / C.MINION_STOCK_INTERVAL),
        ]

        fighter = game.fighter
        if fighter is not None:
            obs_parts += [1.0, unit(center_x(fighter) / w), unit(fighter.y / h),
                          unit(fighter.health_fraction)]
        else:
            obs_parts += [-1.0, 0.0, 0.0, -1.0]

        by_slot = {b.slot: b for b in game.bunkers}
        for slot in range(C.BUNKER_COUNT):
            b = by_slot.get(slot)
            if b is not None:
                obs_parts += [1.0, unit(b.health_fraction)]
            else:
                obs_parts += [-1.0, -1.0]

        # Minions furthest down first (closest to a breach)
        minions = sorted(game.minions, key=lambda m: m.y, reverse=True)
        for i in range(self.k_minions):
            if i < len(minions):
                m = minions[i]
                obs_parts += [1.0, unit(center_x(m) / w), unit(m.y / h)]
            else:
                obs_parts += [0.0, 0.0, 0.0]

        # Incoming fire nearest the mothership
        px, py = center_x(player), player.y + player.height
        hostile = sorted(
            (p for p in game.projectiles if not p.friendly),
            key=lambda p: (p.x - px) ** 2 + (p.y - py) ** 2,
        )
        for i in range(self.m_projectiles):
            if i < len(hostile):
                p = hostile[i]
                obs_parts += [1.0, clamp((p.x - px) / w, -1, 1), clamp((p.y - py) / h, -1, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _compute_reward(self) -> float:
        cfg = self.reward_config
        events = self.game.events

        reward = 0.0
        reward += cfg["R_SCORE"] * events.get("score", 0.0) / 100.0
        reward -= cfg["R_DAMAGE"] * events.get("damage", 0.0)
        reward -= cfg["R_MINION_LOST"] * events.get("minions_lost", 0.0)
        reward -= cfg["R_SHOT"] * events.get("shots", 0.0)
        reward -= cfg["R_TIME"]

        result = self.game.result
        if result is not None and self.game.game_over:
            reward += cfg["R_WIN"] if result.win else -cfg["R_LOSS"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        snap = self.game.snapshot()
        info: Dict[str, Any] = {
            "health": snap.health,
            "stock": snap.stock,
            "active_minions": snap.active_minions,
            "fighter_life": snap.fighter_label,
            "bunkers_remaining": snap.bunkers_remaining,
            "score": snap.score,
            "cooldown_ready": snap.cooldown_ready,
            "events": dict(self.game.events),
            "step": self._step_count,
        }
        if snap.result is not None:
            info["win"] = snap.result.win
            info["reason"] = snap.result.reason
        return info

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        from .render import InvaderWindow

        if self._window is None:
            self._window = InvaderWindow(
                self.game, visible=self.render_mode == "human", interactive=False,
            )
        self._window.game = self.game

        if self.render_mode == "human":
            self._window.dispatch_events()
            self._window.on_draw()
            self._window.flip()
            return None
        return self._window.capture_rgb_array()

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = False, seed: Optional[int] = 42):
    """Run a random episode for testing"""
    env = InvaderEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    print("Running random episode...")
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

    print(f"Random episode return: {total:.2f}  score: {info['score']}  "
          f"steps: {info['step']}  reason: {info.get('reason', 'truncated')}")
    env.close()
    return total, info


if __name__ == "__main__":
    run_random_episode(render=True)
