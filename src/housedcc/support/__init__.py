"""
Event sources, the selector event loop and tick cadences shared by the channel and its supervisor.
"""
