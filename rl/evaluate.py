"""
Evaluation script for trained agents and scripted baselines
"""

import time
import argparse
from typing import Callable, Dict, Optional

import numpy as np

from invader import InvaderEnv
from invader.utils import center_x
from rl.configs.invader_config import ENV_CONFIG

DEPLOY_BATCH = 3


def heuristic_action(env: InvaderEnv) -> np.ndarray:
    """
    Scripted baseline: hover over the weakest target, fire whenever ready,
    deploy minions in small batches.
    """
    game = env.game
    player = game.player
    target = game.fighter
    if target is None and game.enemies:
        target = min(game.enemies, key=lambda e: e.life)

    left = right = 0
    if target is not None:
        dx = center_x(target) - center_x(player)
        if dx < -player.speed:
            left = 1
        elif dx > player.speed:
            right = 1

    fire = 1 if player.cooldown_timer <= 0 else 0
    deploy = 1 if player.stock >= DEPLOY_BATCH else 0
    return np.array([left, right, fire, deploy], dtype=np.int64)


def _run_episodes(
    env: InvaderEnv,
    policy: Callable[[np.ndarray], np.ndarray],
    n_episodes: int,
    seed: Optional[int],
    label: str,
) -> Dict[str, float]:
    episode_rewards, episode_lengths, scores, wins = [], [], [], []

    for episode in range(n_episodes):
        obs, info = env.reset(seed=seed + episode if seed is not None else None)
        terminated = truncated = False
        total_reward = 0.0
        steps = 0

        while not (terminated or truncated):
            obs, reward, terminated, truncated, info = env.step(policy(obs))
            total_reward += reward
            steps += 1
            if env.render_mode == "human":
                time.sleep(1.0 / 120)

        episode_rewards.append(total_reward)
        episode_lengths.append(steps)
        scores.append(info["score"])
        wins.append(1.0 if info.get("win") else 0.0)

        print(f"Episode {episode + 1}/{n_episodes}: "
              f"Reward = {total_reward:.2f}, Length = {steps}, Score = {info['score']}, "
              f"{info.get('reason', 'truncated')}")

    env.close()

    results = {
        "mean_reward": float(np.mean(episode_rewards)),
        "std_reward": float(np.std(episode_rewards)),
        "mean_length": float(np.mean(episode_lengths)),
        "mean_score": float(np.mean(scores)),
        "win_rate": float(np.mean(wins)),
    }

    print("\n" + "="*50)
    print(f"{label} Results ({n_episodes} episodes):")
    print(f"Mean Reward: {results['mean_reward']:.2f} ± {results['std_reward']:.2f}")
    print(f"Mean Episode Length: {results['mean_length']:.1f}")
    print(f"Mean Score: {results['mean_score']:.0f}  Win Rate: {results['win_rate']:.2%}")
    print("="*50)
    return results


def evaluate_baseline(policy: str = "random", n_episodes: int = 10,
                      render: bool = False, seed: Optional[int] = None):
    """Evaluate the random or heuristic baseline"""
    env = InvaderEnv(render_mode="human" if render else None, **ENV_CONFIG)
    if policy == "random":
        act = lambda obs: env.action_space.sample()
    elif policy == "heuristic":
        act = lambda obs: heuristic_action(env)
    else:
        raise ValueError(f"Unknown baseline policy: {policy}")
    return _run_episodes(env, act, n_episodes, seed, policy.capitalize())


def evaluate_model(
    model_path: str,
    algo: str = "ppo",
    n_episodes: int = 10,
    render: bool = True,
    seed: Optional[int] = None,
    vec_normalize_path: Optional[str] = None,
):
    """
    Evaluate a trained model

    Args:
        model_path: Path to the saved model
        algo: Algorithm used ('ppo' or 'dqn')
        n_episodes: Number of episodes to evaluate
        render: Whether to render the environment
        seed: Random seed for evaluation
        vec_normalize_path: Path to VecNormalize stats (for PPO)
    """
    from stable_baselines3 import PPO, DQN
    from stable_baselines3.common.vec_env import DummyVecEnv, VecNormalize

    if algo == "ppo":
        model = PPO.load(model_path)
    elif algo == "dqn":
        model = DQN.load(model_path)
    else:
        raise ValueError(f"Unknown algorithm: {algo}")

    env = InvaderEnv(render_mode="human" if render else None, **ENV_CONFIG)

    normalizer = None
    if vec_normalize_path:
        normalizer = VecNormalize.load(vec_normalize_path, DummyVecEnv([lambda: InvaderEnv(**ENV_CONFIG)]))
        normalizer.training = False
        normalizer.norm_reward = False

    nvec = env.action_space.nvec

    def act(obs):
        if normalizer is not None:
            obs = normalizer.normalize_obs(obs)
        action, _ = model.predict(obs, deterministic=True)
        if algo == "dqn":
            # Flat Discrete(16) index back to [left, right, fire, deploy]
            return np.array(np.unravel_index(int(action), nvec), dtype=np.int64)
        return action

    return _run_episodes(env, act, n_episodes, seed, algo.upper())


def main():
    parser = argparse.ArgumentParser(description="Evaluate an agent on Inverse Invader")
    parser.add_argument(
        "model_path",
        type=str,
        nargs="?",
        default=None,
        help="Path to the trained model (omit to run a baseline)",
    )
    parser.add_argument(
        "--algo",
        type=str,
        default="ppo",
        choices=["ppo", "dqn"],
        help="Algorithm used to train the model (default: ppo)",
    )
    parser.add_argument(
        "--baseline",
        type=str,
        default="heuristic",
        choices=["random", "heuristic"],
        help="Baseline policy when no model is given (default: heuristic)",
    )
    parser.add_argument("--n-episodes", type=int, default=10,
                        help="Number of evaluation episodes (default: 10)")
    parser.add_argument("--no-render", action="store_true", help="Disable rendering")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--vec-normalize", type=str, default=None,
                        help="Path to VecNormalize stats file (for PPO)")
    parser.add_argument("--compare-random", action="store_true",
                        help="Also evaluate random policy for comparison")

    args = parser.parse_args()

    if args.model_path is None:
        results = evaluate_baseline(args.baseline, args.n_episodes,
                                    render=not args.no_render, seed=args.seed)
    else:
        results = evaluate_model(
            model_path=args.model_path,
            algo=args.algo,
            n_episodes=args.n_episodes,
            render=not args.no_render,
            seed=args.seed,
            vec_normalize_path=args.vec_normalize,
        )

    if args.compare_random:
        print("\n")
        random_results = evaluate_baseline("random", args.n_episodes, seed=args.seed)
        improvement = results["mean_reward"] - random_results["mean_reward"]
        print(f"\nImprovement over random: {improvement:.2f}")


if __name__ == "__main__":
    main()
