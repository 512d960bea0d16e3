"""
DadCircles matching and group lifecycle engine.
"""
