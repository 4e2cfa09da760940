"""
Fixed tuning values for the single Inverse Invader game mode
"""

# Timing
FPS = 60
FRAME_MS = 1000.0 / FPS

# Arena (default size; the only sizing inputs of the simulation)
WIDTH = 800
HEIGHT = 600

# Mothership
MOTHERSHIP_LIFE = 30
MOTHERSHIP_COOLDOWN = 120  # 2 seconds at 60 fps
MOTHERSHIP_SPEED = 6.0
MOTHERSHIP_SIZE = (100.0, 50.0)
MOTHERSHIP_Y = 50.0
MINION_STOCK_INTERVAL = 120

# Minion
MINION_SIZE = (20.0, 20.0)
MINION_DESCENT_SPEED = 0.25
MINION_DEPLOY_COLUMNS = 5

# Enemies
FIGHTER_LIFE = 3
FIGHTER_SPEED = 4.0
FIGHTER_SIZE = (40.0, 40.0)
FIGHTER_Y_OFFSET = 150.0  # above the bottom edge
FIGHTER_THREAT_RANGE = 100.0
FIGHTER_DEAD_ZONE = 5.0
FIGHTER_ALIGN_RANGE = 30.0
FIGHTER_AIMED_DELAY = 30
FIGHTER_AIMED_CHANCE = 0.1
FIGHTER_IDLE_PERIOD_MS = 500.0
FIGHTER_IDLE_AMPLITUDE = 2.0

BUNKER_LIFE = 3
BUNKER_COUNT = 4
BUNKER_SIZE = (60.0, 40.0)
BUNKER_Y_OFFSET = 130.0
BUNKER_MARGIN_FRAC = 0.1
BUNKER_FIRE_CHANCE = 0.014

ENEMY_FIRE_DELAY = 200
FIGHTER_FIRE_CHANCE = 0.05

# Projectiles (positive = downward, toward the enemies)
PROJECTILE_SIZE = (6.0, 15.0)
PLAYER_PROJECTILE_SPEED = 15.0
FIGHTER_PROJECTILE_SPEED = -8.0
BUNKER_PROJECTILE_SPEED = -5.0
PROJECTILE_MARGIN = 50.0

# Particles
PARTICLE_LIFE = 100.0
PARTICLE_DECAY = 4.0

# Scoring
SCORE_PROJECTILE_HIT = 50
SCORE_KAMIKAZE = 100

# Explosion sizes
BURST_HIT = 5
BURST_MINION = 10
BURST_DEPLOY = 10
BURST_KAMIKAZE = 15

# Colors (RGB)
COLOR_MOTHERSHIP = (0, 255, 0)
COLOR_MINION = (0, 255, 170)
COLOR_FIGHTER = (255, 0, 0)
COLOR_BUNKER = (255, 136, 0)
COLOR_BULLET_PLAYER = (187, 0, 255)
COLOR_BULLET_ENEMY = (255, 255, 0)
COLOR_IMPACT = (255, 255, 255)

# Round results
REASON_BREACH = "Minion breached defenses!"
REASON_ELIMINATED = "All hostiles eliminated!"
REASON_DESTROYED = "Mothership destroyed."
TITLE_WIN = "MISSION ACCOMPLISHED"
TITLE_LOSS = "MISSION FAILED"
FIGHTER_DESTROYED_LABEL = "DESTROYED"
