"""
Configuration and logging helpers shared by the maps modules.
"""
