"""
CLI Commands - Command implementations for the aniverse application.
"""
