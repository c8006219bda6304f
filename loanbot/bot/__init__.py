"""Telegram bot boundary (aiogram)."""
