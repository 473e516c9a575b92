"""
efnash: Extensive-form Nash equilibria by Liapunov minimization

Computes approximate Nash equilibria of finite extensive-form games by
minimizing a Liapunov function over behavior profiles, either on the
whole game or subgame by subgame.
"""

__version__ = "0.1.0"
