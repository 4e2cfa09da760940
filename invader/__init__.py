"""Inverse Invader - mothership arcade simulation, Gymnasium env and Arcade front end"""

from .simulation import GameState, HudSnapshot, Intents, InvaderGame, RoundResult
from .invader_env import InvaderEnv, run_random_episode

__all__ = [
    'GameState',
    'HudSnapshot',
    'Intents',
    'InvaderGame',
    'InvaderEnv',
    'RoundResult',
    'run_random_episode',
]
