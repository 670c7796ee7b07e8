"""Chirper 微博客服务"""

__version__ = "0.1.0"
