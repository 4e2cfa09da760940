"""
Training configuration for the Inverse Invader environment
"""

# Environment parameters
ENV_CONFIG = {
    "width": 800,
    "height": 600,
    "max_steps": 7200,  # 2 minutes at 60 FPS
    "k_minions": 5,
    "m_projectiles": 5,
}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Balanced: score, survival and round outcome",
    "R_SCORE": 1.0,        # Per 100 points (hit = 0.5, kamikaze = 1.0)
    "R_DAMAGE": 0.5,       # Per enemy projectile taken
    "R_MINION_LOST": 0.05, # Per minion shot down (either side)
    "R_SHOT": 0.01,        # Per missile fired
    "R_TIME": 0.001,       # Per tick
    "R_WIN": 10.0,
    "R_LOSS": 10.0,
}

REWARD_CONFIG_SWARM = {
    "name": "swarm",
    "description": "Favour minion play - cheap shots, expensive minion losses, big win bonus",
    "R_SCORE": 1.5,
    "R_DAMAGE": 0.3,
    "R_MINION_LOST": 0.2,
    "R_SHOT": 0.0,
    "R_TIME": 0.002,
    "R_WIN": 20.0,
    "R_LOSS": 10.0,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "swarm": REWARD_CONFIG_SWARM,
}

# ==============================================================================
# ALGORITHM HYPERPARAMETERS
# ==============================================================================

PPO_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 3e-4,
    "n_steps": 2048,
    "batch_size": 256,
    "n_epochs": 10,
    "gamma": 0.995,  # long horizon: rounds last thousands of ticks
    "gae_lambda": 0.95,
    "clip_range": 0.2,
    "ent_coef": 0.01,
    "vf_coef": 0.5,
    "max_grad_norm": 0.5,
    "verbose": 1,
}

DQN_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 1e-4,
    "buffer_size": 100_000,
    "learning_starts": 1000,
    "batch_size": 128,
    "tau": 1.0,
    "gamma": 0.995,
    "train_freq": 4,
    "gradient_steps": 1,
    "target_update_interval": 1000,
    "exploration_fraction": 0.1,
    "exploration_initial_eps": 1.0,
    "exploration_final_eps": 0.05,
    "verbose": 1,
}

# ==============================================================================
# TRAINING SETTINGS
# ==============================================================================

TRAINING_CONFIG = {
    "total_timesteps": 1_000_000,
    "save_freq": 50_000,
    "eval_freq": 20_000,
    "n_eval_episodes": 5,
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}
