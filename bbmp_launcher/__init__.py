"""
bbmp-launcher: fetches, provisions and supervises BlueBerryMinecraftProxy.
"""

__version__ = "1.0.0"
