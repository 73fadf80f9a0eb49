"""
API Module for Barista Bot.

FastAPI application with routes for:
- Telegram webhook updates
- Direct chat requests and session management
"""
