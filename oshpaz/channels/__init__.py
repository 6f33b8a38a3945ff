"""Channels module - messaging platform integrations."""

from .telegram import TelegramBot, TelegramError

__all__ = ['TelegramBot', 'TelegramError']
