"""Core module - environment configuration"""
from . import config

__all__ = ['config']
