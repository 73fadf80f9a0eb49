"""
Configuration for Barista Bot.
"""
