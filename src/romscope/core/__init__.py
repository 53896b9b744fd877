"""Core domain package for romscope.

Core contains term parsing, filter compilation, query execution and result
delivery without any Telegram or storage-specific code, keeping the search
logic portable.
"""
