"""
Training script for the Inverse Invader environment using Stable-Baselines3
Supports PPO and DQN with round-outcome metrics tracking.
"""

import os
import argparse
from typing import Optional

from stable_baselines3 import PPO, DQN
from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize
from stable_baselines3.common.callbacks import CheckpointCallback, EvalCallback
from stable_baselines3.common.monitor import Monitor

from invader import InvaderEnv
from rl.configs.invader_config import (
    ENV_CONFIG, PPO_CONFIG, DQN_CONFIG, TRAINING_CONFIG, REWARD_CONFIGS,
)
from rl.metrics_callback import MetricsCallback
from rl.wrappers import MultiDiscreteToDiscreteWrapper


def make_env(seed: Optional[int] = None, reward_name: str = "baseline",
             wrap_for_dqn: bool = False):
    """Factory function to create the environment"""
    def _init():
        env = InvaderEnv(reward_config=REWARD_CONFIGS[reward_name], **ENV_CONFIG)
        if wrap_for_dqn:
            env = MultiDiscreteToDiscreteWrapper(env)
        env = Monitor(env, info_keywords=("score",))
        if seed is not None:
            env.reset(seed=seed)
        return env
    return _init


def _callbacks(algo: str, eval_env, save_dir: str, log_dir: str, n_envs: int = 1):
    checkpoint_callback = CheckpointCallback(
        save_freq=max(1, TRAINING_CONFIG["save_freq"] // n_envs),
        save_path=save_dir,
        name_prefix=f"{algo}_invader",
    )
    eval_callback = EvalCallback(
        eval_env,
        best_model_save_path=save_dir,
        log_path=log_dir,
        eval_freq=max(1, TRAINING_CONFIG["eval_freq"] // n_envs),
        n_eval_episodes=TRAINING_CONFIG["n_eval_episodes"],
        deterministic=True,
        render=False,
    )
    metrics_callback = MetricsCallback(log_dir=log_dir, algo_name=algo, verbose=1)
    return [checkpoint_callback, eval_callback, metrics_callback], metrics_callback


def _report(algo: str, final_path: str, metrics_callback: MetricsCallback):
    print(f"\n{'='*60}")
    print(f"{algo.upper()} Training complete! Model saved to {final_path}")
    summary = metrics_callback.get_summary()
    if summary:
        print(f"Mean Reward: {summary['mean_reward']:.2f} ± {summary['std_reward']:.2f}")
        print(f"Win Rate: {summary['win_rate']:.2%}  Mean Score: {summary['mean_score']:.0f}")
        print(f"Total Episodes: {summary['total_episodes']}")
    print(f"{'='*60}\n")


def train_ppo(
    total_timesteps: Optional[int] = None,
    reward_name: str = "baseline",
    n_envs: int = 4,
):
    """Train PPO agent on vectorised, normalised envs"""
    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    save_dir = os.path.join(TRAINING_CONFIG["model_dir"], f"ppo_{reward_name}")
    log_dir = os.path.join(TRAINING_CONFIG["log_dir"], f"ppo_{reward_name}")
    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Training PPO for {total_timesteps:,} timesteps ({reward_name} rewards)...")
    print(f"Using {n_envs} parallel environments")
    print(f"{'='*60}\n")

    env = DummyVecEnv([make_env(seed=i, reward_name=reward_name) for i in range(n_envs)])
    env = VecNormalize(env, norm_obs=True, norm_reward=True)

    eval_env = DummyVecEnv([make_env(seed=100, reward_name=reward_name)])
    eval_env = VecNormalize(eval_env, norm_obs=True, norm_reward=False, training=False)

    callbacks, metrics_callback = _callbacks("ppo", eval_env, save_dir, log_dir, n_envs)

    model = PPO(
        env=env,
        tensorboard_log=os.path.join(TRAINING_CONFIG["tensorboard_log"], "ppo"),
        **PPO_CONFIG
    )
    model.learn(total_timesteps=total_timesteps, callback=callbacks)

    final_path = os.path.join(save_dir, "ppo_invader_final")
    model.save(final_path)
    env.save(os.path.join(save_dir, "vec_normalize.pkl"))

    _report("ppo", final_path, metrics_callback)
    return model, metrics_callback


def train_dqn(
    total_timesteps: Optional[int] = None,
    reward_name: str = "baseline",
):
    """Train DQN agent with a flattened Discrete(16) action space"""
    if total_timesteps is None:
        total_timesteps = TRAINING_CONFIG["total_timesteps"]

    save_dir = os.path.join(TRAINING_CONFIG["model_dir"], f"dqn_{reward_name}")
    log_dir = os.path.join(TRAINING_CONFIG["log_dir"], f"dqn_{reward_name}")
    os.makedirs(save_dir, exist_ok=True)
    os.makedirs(log_dir, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Training DQN for {total_timesteps:,} timesteps ({reward_name} rewards)...")
    print(f"Using MultiDiscrete->Discrete action wrapper (16 actions)")
    print(f"{'='*60}\n")

    env = DummyVecEnv([make_env(seed=0, reward_name=reward_name, wrap_for_dqn=True)])
    eval_env = DummyVecEnv([make_env(seed=100, reward_name=reward_name, wrap_for_dqn=True)])

    callbacks, metrics_callback = _callbacks("dqn", eval_env, save_dir, log_dir)

    model = DQN(
        env=env,
        tensorboard_log=os.path.join(TRAINING_CONFIG["tensorboard_log"], "dqn"),
        **DQN_CONFIG
    )
    model.learn(total_timesteps=total_timesteps, callback=callbacks)

    final_path = os.path.join(save_dir, "dqn_invader_final")
    model.save(final_path)

    _report("dqn", final_path, metrics_callback)
    return model, metrics_callback


def main():
    parser = argparse.ArgumentParser(description="Train RL agent to fly the mothership")
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=["ppo", "dqn", "all"],
        help="RL algorithm to use (default: ppo)",
    )
    parser.add_argument(
        "--reward",
        type=str,
        default="baseline",
        choices=sorted(REWARD_CONFIGS),
        help="Reward shaping configuration (default: baseline)",
    )
    parser.add_argument(
        "--timesteps",
        type=int,
        default=None,
        help=f"Total timesteps to train (default: {TRAINING_CONFIG['total_timesteps']})",
    )
    parser.add_argument(
        "--n-envs",
        type=int,
        default=4,
        help="Number of parallel environments for PPO (default: 4)",
    )

    args = parser.parse_args()

    if args.algo in ("dqn", "all"):
        train_dqn(total_timesteps=args.timesteps, reward_name=args.reward)
    if args.algo in ("ppo", "all"):
        train_ppo(total_timesteps=args.timesteps, reward_name=args.reward, n_envs=args.n_envs)


if __name__ == "__main__":
    main()
