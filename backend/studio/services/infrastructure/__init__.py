"""
Infrastructure - storage, generation providers and orchestration.
"""
