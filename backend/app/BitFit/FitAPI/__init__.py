"""
BitFit HTTP API blueprints.
"""
