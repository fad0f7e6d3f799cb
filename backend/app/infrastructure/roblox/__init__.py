"""Roblox infrastructure package."""

from .roblox_avatar_resolver import RobloxAvatarResolver

__all__ = ["RobloxAvatarResolver"]
