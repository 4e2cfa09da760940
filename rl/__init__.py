"""Reinforcement learning on the Inverse Invader environment"""
