"""
sessionguard - keeps tool calls and tool results paired in agent session
transcripts, and keeps oversized tool output out of them.
"""

__version__ = "0.1.0"
