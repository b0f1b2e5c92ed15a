"""
Werewolf game orchestrator: roles, phases, scheduler and AI players.
"""
